from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.config.catalog import MAX_TAGS, DEFAULT_LICENSE, DEFAULT_CATEGORY, license_label, slugify_category


class RepositoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    is_private: bool = False
    tags: List[str] = []
    license: str = DEFAULT_LICENSE
    category: str = DEFAULT_CATEGORY

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("Repository name required")
        return value

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, tags: List[str]) -> List[str]:
        normalized = []
        for tag in tags:
            tag = tag.strip().lower()
            if tag and tag not in normalized:
                normalized.append(tag)
        if len(normalized) > MAX_TAGS:
            raise ValueError(f"At most {MAX_TAGS} tags are allowed")
        return normalized

    @field_validator("license")
    @classmethod
    def resolve_license(cls, value: str) -> str:
        return license_label(value)

    @field_validator("category")
    @classmethod
    def resolve_category(cls, value: str) -> str:
        return slugify_category(value) or DEFAULT_CATEGORY


class RepositoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = ""
    owner_id: str
    owner_username: str
    owner_email: str = ""
    is_private: bool = False
    tags: List[str] = []
    license: Optional[str] = None
    category: Optional[str] = None
    stars_count: int = 0
    forks_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_starred: Optional[bool] = None

    class Config:
        from_attributes = True


class RepositoryStats(BaseModel):
    total_repos: int
    total_prompts: int
    total_contributors: int
