from supabase import Client
from app.modules.repositories.schemas import RepositoryCreate, RepositoryResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_repository_or_404, check_repository_visible
from app.core.errors import backend_error
from typing import List, Optional, Dict, Any, Iterable, Set
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def to_repository_response(repo: Dict[str, Any], profile: Dict[str, Any]) -> RepositoryResponse:
    """Join a repositories row with its owner's profile"""
    data = dict(repo)
    data["tags"] = repo.get("tags") or []
    data["description"] = repo.get("description") or ""
    data["owner_username"] = profile["username"]
    data["owner_email"] = profile.get("email") or ""
    return RepositoryResponse(**data)


class RepositoryService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.profiles = ProfileService(supabase)

    def load_repositories(self, raise_on_error: bool = False) -> List[RepositoryResponse]:
        """Public repositories, newest first, joined with owner profiles.
        Repositories whose owner has no username are left out. Backend errors yield []
        unless raise_on_error is set, in which case they surface as HTTPException."""
        try:
            result = self.supabase.table("repositories")\
                .select("*")\
                .eq("is_private", False)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading repositories: {e}")
            if raise_on_error:
                raise backend_error("load repositories", e)
            return []

        repositories = result.data or []
        if not repositories:
            return []

        owner_ids = list(dict.fromkeys(repo["owner_id"] for repo in repositories))
        try:
            profiles_result = self.supabase.table("profiles")\
                .select("id, username, email")\
                .in_("id", owner_ids)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading profiles: {e}")
            if raise_on_error:
                raise backend_error("load repository owners", e)
            return []

        profiles = {p["id"]: p for p in profiles_result.data or []}
        items = []
        for repo in repositories:
            profile = profiles.get(repo["owner_id"])
            if not profile or not profile.get("username"):
                continue
            items.append(to_repository_response(repo, profile))
        return items

    def create_repository(self, repo_data: RepositoryCreate, user_data: Dict[str, Any]) -> RepositoryResponse:
        """Create a repository owned by the caller, backfilling the caller's username first.
        Duplicate (owner, name) pairs are rejected by the backend unique constraint (409)."""
        profile = self.profiles.ensure_username(user_data)

        payload = {
            "name": repo_data.name,
            "description": repo_data.description,
            "owner_id": user_data["id"],
            "is_private": repo_data.is_private,
            "tags": repo_data.tags,
            "license": repo_data.license,
            "category": repo_data.category,
            "stars_count": 0,
            "forks_count": 0,
        }
        logger.info(f"Creating repository {repo_data.name!r} for owner {user_data['id']}")

        try:
            result = self.supabase.table("repositories").insert(payload).execute()
        except Exception as e:
            logger.error(f"Error creating repository: {e}")
            raise backend_error("create repository", e)

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create repository")

        return to_repository_response(result.data[0], profile)

    def get_repository(self, repository_id: str) -> Dict[str, Any]:
        return get_repository_or_404(repository_id, self.supabase)

    def get_repository_by_owner_and_name(
        self,
        owner: str,
        name: str,
        viewer: Optional[Dict[str, Any]] = None
    ) -> RepositoryResponse:
        """Resolve /{owner}/{name}. Private repositories resolve only for their owner."""
        owner_profile = self.profiles.get_profile_by_username(owner)

        try:
            result = self.supabase.table("repositories")\
                .select("*")\
                .eq("name", name)\
                .eq("owner_id", owner_profile["id"])\
                .execute()
        except Exception as e:
            logger.error(f"Error loading repository: {e}")
            raise backend_error("load repository", e)

        repos = result.data or []
        if not repos:
            logger.error(f"No repository found: name={name} owner_id={owner_profile['id']}")
            raise HTTPException(status_code=404, detail=f"Repository '{name}' not found for user '{owner}'")
        if len(repos) > 1:
            logger.error(f"Multiple repositories found: name={name} owner_id={owner_profile['id']} count={len(repos)}")
            raise HTTPException(
                status_code=500,
                detail=f"Multiple repositories found with name '{name}'. Please contact support."
            )

        repo = check_repository_visible(repos[0], viewer)
        response = to_repository_response(repo, owner_profile)
        if viewer:
            response.is_starred = self.is_starred(repo["id"], viewer["id"])
        return response

    def is_starred(self, repository_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table("stars")\
                .select("id")\
                .eq("repository_id", repository_id)\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error checking star status: {e}")
            return False
        return bool(result and result.data)

    def starred_repository_ids(self, user_id: str, repository_ids: Iterable[str]) -> Set[str]:
        """Which of the given repositories the user has starred, in one query"""
        repository_ids = list(repository_ids)
        if not repository_ids:
            return set()
        try:
            result = self.supabase.table("stars")\
                .select("repository_id")\
                .eq("user_id", user_id)\
                .in_("repository_id", repository_ids)\
                .execute()
        except Exception as e:
            logger.error(f"Error checking star status: {e}")
            return set()
        return {row["repository_id"] for row in result.data or []}

    def star_repository(self, repository_id: str, user_id: str) -> None:
        """Insert the star row, then bump stars_count. A failed counter RPC is only logged."""
        try:
            self.supabase.table("stars").insert({
                "user_id": user_id,
                "repository_id": repository_id
            }).execute()
        except Exception as e:
            logger.error(f"Error starring repository: {e}")
            raise backend_error("star repository", e)

        self._update_stars_count("increment_stars_count", repository_id)

    def unstar_repository(self, repository_id: str, user_id: str) -> None:
        """Delete the star row, then decrement stars_count. No star row means nothing to decrement."""
        try:
            result = self.supabase.table("stars")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("repository_id", repository_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error unstarring repository: {e}")
            raise backend_error("unstar repository", e)

        if not result.data:
            logger.info(f"Repository {repository_id} was not starred by {user_id}; count left unchanged")
            return

        self._update_stars_count("decrement_stars_count", repository_id)

    def _update_stars_count(self, rpc_name: str, repository_id: str) -> None:
        # Fails open: the star row change is not rolled back, so the counter can drift.
        try:
            self.supabase.rpc(rpc_name, {"repository_id": repository_id}).execute()
        except Exception as e:
            logger.error(f"Error updating stars count ({rpc_name}, repository {repository_id}): {e}")
