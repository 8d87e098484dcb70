from supabase import Client
from app.modules.prompts.schemas import PromptCreate, PromptUpdate, PromptResponse
from app.core.dependencies import check_repository_owner
from app.core.errors import backend_error
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

PROMPT_FILE_SUFFIX = ".md"


def content_size(content: str) -> int:
    """Stored size of a prompt: UTF-8 byte length of its content"""
    return len(content.encode("utf-8"))


def prompt_file_path(name: str) -> str:
    return name if name.endswith(PROMPT_FILE_SUFFIX) else f"{name}{PROMPT_FILE_SUFFIX}"


class PromptService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_prompt(self, prompt_data: PromptCreate, user_id: str) -> PromptResponse:
        """Create a prompt in a repository the caller owns. Ownership is checked before the insert."""
        check_repository_owner(prompt_data.repository_id, user_id, self.supabase, action="create")

        payload = {
            "repository_id": prompt_data.repository_id,
            "name": prompt_data.name,
            "content": prompt_data.content,
            "description": prompt_data.description or "",
            "file_path": prompt_data.file_path or prompt_file_path(prompt_data.name),
            "size": content_size(prompt_data.content),
        }
        logger.info(
            f"Creating prompt {payload['file_path']!r} in repository {prompt_data.repository_id} "
            f"({payload['size']} bytes)"
        )

        try:
            result = self.supabase.table("prompts").insert(payload).execute()
        except Exception as e:
            logger.error(f"Error creating prompt: {e}")
            raise backend_error("create prompt", e)

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create prompt")
        return PromptResponse(**result.data[0])

    def get_repository_prompts(self, repository_id: str) -> List[PromptResponse]:
        try:
            result = self.supabase.table("prompts")\
                .select("*")\
                .eq("repository_id", repository_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading prompts: {e}")
            return []
        return [PromptResponse(**prompt) for prompt in result.data or []]

    def get_prompt(self, prompt_id: str) -> Optional[PromptResponse]:
        try:
            result = self.supabase.table("prompts")\
                .select("*")\
                .eq("id", prompt_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error loading prompt: {e}")
            return None
        if not result or not result.data:
            return None
        return PromptResponse(**result.data)

    def _get_prompt_repository_id(self, prompt_id: str) -> str:
        prompt = self.get_prompt(prompt_id)
        if prompt is None:
            raise HTTPException(status_code=404, detail="Prompt not found")
        return prompt.repository_id

    def update_prompt(self, prompt_id: str, updates: PromptUpdate, user_id: str) -> PromptResponse:
        """Apply the provided fields; size follows content whenever content changes"""
        update_data: Dict[str, Any] = updates.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        if "content" in update_data:
            update_data["size"] = content_size(update_data["content"])

        repository_id = self._get_prompt_repository_id(prompt_id)
        check_repository_owner(repository_id, user_id, self.supabase, action="update")

        try:
            result = self.supabase.table("prompts")\
                .update(update_data)\
                .eq("id", prompt_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating prompt: {e}")
            raise backend_error("update prompt", e)

        if not result.data:
            raise HTTPException(status_code=404, detail="Prompt not found")
        return PromptResponse(**result.data[0])

    def delete_prompt(self, prompt_id: str, user_id: str) -> bool:
        repository_id = self._get_prompt_repository_id(prompt_id)
        check_repository_owner(repository_id, user_id, self.supabase, action="delete")

        try:
            result = self.supabase.table("prompts")\
                .delete()\
                .eq("id", prompt_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting prompt: {e}")
            raise backend_error("delete prompt", e)

        return len(result.data or []) > 0
