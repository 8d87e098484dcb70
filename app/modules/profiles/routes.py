from fastapi import APIRouter, Depends, HTTPException
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_user, get_request_supabase
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_request_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Current user's profile"""
    profile = service.get_profile(current_user["id"])
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str,
    service: ProfileService = Depends(get_profile_service)
):
    """Public profile lookup by username"""
    return service.get_profile_by_username(username)
