"""
Backfill Usernames Script
Sets profiles.username to the local part of the email for every profile
whose username is still NULL, so the NOT NULL / UNIQUE constraint can be
applied. Run with: python -m app.scripts.backfill_usernames
"""

import sys
from app.database.supabase_client import get_service_supabase
from supabase import Client
from typing import Dict, Set
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def username_from_email(email: str) -> str:
    return (email or "").split("@")[0].strip()


def unique_username(base: str, taken: Set[str]) -> str:
    """base, base-2, base-3, ... whichever is free"""
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def backfill_usernames(supabase: Client) -> Dict[str, int]:
    """Fill missing usernames; returns {"updated": n, "skipped": m}"""
    logger.info("Backfilling missing usernames...")

    missing = supabase.table("profiles")\
        .select("id, email")\
        .is_("username", "null")\
        .execute()
    profiles = missing.data or []
    if not profiles:
        logger.info("No profiles with missing usernames")
        return {"updated": 0, "skipped": 0}

    existing = supabase.table("profiles")\
        .select("username")\
        .not_.is_("username", "null")\
        .execute()
    taken = {p["username"] for p in existing.data or []}

    updated_count = 0
    skipped_count = 0
    for profile in profiles:
        base = username_from_email(profile.get("email"))
        if not base:
            logger.warning(f"Profile {profile['id']} has no email; skipping")
            skipped_count += 1
            continue
        username = unique_username(base, taken)
        try:
            supabase.table("profiles")\
                .update({"username": username})\
                .eq("id", profile["id"])\
                .execute()
            taken.add(username)
            updated_count += 1
            logger.debug(f"Set username {username!r} for profile {profile['id']}")
        except Exception as e:
            logger.error(f"Error updating profile {profile['id']}: {e}")
            skipped_count += 1

    logger.info(f"Usernames backfilled: {updated_count} updated, {skipped_count} skipped")
    return {"updated": updated_count, "skipped": skipped_count}


def main():
    try:
        backfill_usernames(get_service_supabase())
    except Exception as e:
        logger.error(f"Error during backfill: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
