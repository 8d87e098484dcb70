"""
Core dependencies for route protection and repository ownership checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import SupabaseClient, get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase, session_client_factory=SupabaseClient.create_session_client)


def get_request_supabase(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    supabase: Client = Depends(get_supabase)
) -> Client:
    """Client for the current request. With a bearer token, table and RPC calls run as that user."""
    if credentials is None:
        return supabase
    return SupabaseClient.get_user_client(credentials.credentials)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Dict[str, Any]]:
    """Like get_current_user, but anonymous callers get None instead of 401/403"""
    if credentials is None:
        return None
    return auth_service.get_current_user(credentials.credentials)


def get_repository_or_404(repository_id: str, supabase: Client, columns: str = "*") -> Dict[str, Any]:
    try:
        result = supabase.table("repositories")\
            .select(columns)\
            .eq("id", repository_id)\
            .maybe_single()\
            .execute()
    except Exception as e:
        logger.error(f"Error checking repository ownership: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to verify repository ownership"
        )
    if not result or not result.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Repository not found"
        )
    return result.data


def check_repository_owner(repository_id: str, user_id: str, supabase: Client, action: str = "modify") -> Dict[str, Any]:
    """Read-then-check gate: fetch the repository's owner_id and compare to the caller.
    Row-level security on the backend remains the real guard."""
    repository = get_repository_or_404(repository_id, supabase, columns="id, owner_id, is_private")
    if repository.get("owner_id") != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You do not have permission to {action} prompts in this repository"
        )
    return repository


def check_repository_visible(repository: Dict[str, Any], user_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Private repositories are only visible to their owner; everyone else gets 404"""
    if not repository.get("is_private"):
        return repository
    if user_data and repository.get("owner_id") == user_data.get("id"):
        return repository
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Repository not found"
    )
