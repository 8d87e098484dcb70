from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class PromptCreate(BaseModel):
    repository_id: str
    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    description: Optional[str] = None
    file_path: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Prompt name required")
        return value

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt content required")
        return value


class PromptUpdate(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None
    description: Optional[str] = None
    file_path: Optional[str] = None


class PromptResponse(BaseModel):
    id: str
    repository_id: str
    name: str
    content: str
    description: Optional[str] = ""
    file_path: str
    size: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
