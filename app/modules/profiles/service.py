from supabase import Client
from app.core.errors import backend_error
from typing import Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def derive_username(user_data: Dict[str, Any]) -> Optional[str]:
    """Username from signup metadata, else the local part of the email"""
    metadata = user_data.get("user_metadata") or {}
    username = (metadata.get("username") or "").strip()
    if username:
        return username
    email = user_data.get("email") or ""
    local_part = email.split("@")[0].strip()
    return local_part or None


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Profile row for a user id, or None when it does not exist"""
        try:
            result = self.supabase.table("profiles")\
                .select("id, username, email")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error checking user profile: {e}")
            raise backend_error("verify user profile", e)
        if not result or not result.data:
            return None
        return result.data

    def get_profile_by_username(self, username: str) -> Dict[str, Any]:
        """Exactly one profile must match; zero is 404 and duplicates are a data problem"""
        try:
            result = self.supabase.table("profiles")\
                .select("id, username, email")\
                .eq("username", username)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading owner profile: {e}")
            raise backend_error("load owner profile", e)

        profiles = result.data or []
        if not profiles:
            logger.error(f"No profile found for username: {username}")
            raise HTTPException(status_code=404, detail=f"User '{username}' not found")
        if len(profiles) > 1:
            logger.error(f"Multiple profiles found with username: {username}")
            raise HTTPException(
                status_code=500,
                detail=f"Multiple users found with username '{username}'. Please contact support."
            )
        return profiles[0]

    def ensure_username(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Return the caller's profile, backfilling username/email when the username is missing"""
        user_id = user_data["id"]
        profile = self.get_profile(user_id)
        if profile and profile.get("username"):
            return profile

        logger.info(f"Profile missing username for user {user_id}, updating it.")
        username = derive_username(user_data)
        if not username:
            raise HTTPException(status_code=400, detail="Could not determine username for profile")

        email = user_data.get("email")
        try:
            self.supabase.table("profiles")\
                .update({"email": email, "username": username})\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating user profile: {e}")
            raise backend_error("update user profile", e)

        return {"id": user_id, "username": username, "email": email}
