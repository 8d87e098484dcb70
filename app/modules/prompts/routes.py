from fastapi import APIRouter, Depends, HTTPException
from app.modules.prompts.schemas import PromptCreate, PromptUpdate, PromptResponse
from app.modules.prompts.service import PromptService
from app.core.dependencies import (
    get_current_user, get_optional_user, get_request_supabase, get_repository_or_404, check_repository_visible
)
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/prompts", tags=["prompts"])


def get_prompt_service(supabase: Client = Depends(get_request_supabase)) -> PromptService:
    return PromptService(supabase)


@router.get("", response_model=List[PromptResponse])
async def list_prompts(
    repository_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PromptService = Depends(get_prompt_service),
    supabase: Client = Depends(get_request_supabase)
):
    """Prompts of one repository, newest first"""
    check_repository_visible(get_repository_or_404(repository_id, supabase), user_data)
    return service.get_repository_prompts(repository_id)


@router.post("", response_model=PromptResponse, status_code=201)
async def create_prompt(
    prompt_data: PromptCreate,
    user_data: Dict = Depends(get_current_user),
    service: PromptService = Depends(get_prompt_service)
):
    """Create a prompt (repository owner only)"""
    return service.create_prompt(prompt_data, user_data["id"])


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PromptService = Depends(get_prompt_service),
    supabase: Client = Depends(get_request_supabase)
):
    """Get prompt by ID"""
    prompt = service.get_prompt(prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    check_repository_visible(get_repository_or_404(prompt.repository_id, supabase), user_data)
    return prompt


@router.put("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: str,
    prompt_data: PromptUpdate,
    user_data: Dict = Depends(get_current_user),
    service: PromptService = Depends(get_prompt_service)
):
    """Update prompt (repository owner only)"""
    return service.update_prompt(prompt_id, prompt_data, user_data["id"])


@router.delete("/{prompt_id}", status_code=204)
async def delete_prompt(
    prompt_id: str,
    user_data: Dict = Depends(get_current_user),
    service: PromptService = Depends(get_prompt_service)
):
    """Delete prompt (repository owner only)"""
    service.delete_prompt(prompt_id, user_data["id"])
    return None
