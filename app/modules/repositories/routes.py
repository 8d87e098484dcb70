from fastapi import APIRouter, Depends, HTTPException
from app.modules.repositories.schemas import RepositoryCreate, RepositoryResponse, RepositoryStats
from app.modules.repositories.service import RepositoryService
from app.modules.repositories.store import RepositoryStore, get_repository_store
from app.modules.repositories.search import search_repositories
from app.core.dependencies import get_current_user, get_optional_user, get_request_supabase, check_repository_visible
from app.config.catalog import SORT_OPTIONS
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/repositories", tags=["repositories"])


def get_repository_service(supabase: Client = Depends(get_request_supabase)) -> RepositoryService:
    return RepositoryService(supabase)


@router.get("", response_model=List[RepositoryResponse])
async def list_repositories(
    q: str = "",
    category: Optional[str] = None,
    tag: Optional[str] = None,
    sort_by: str = "relevance",
    user_data: Optional[Dict] = Depends(get_optional_user),
    store: RepositoryStore = Depends(get_repository_store),
    service: RepositoryService = Depends(get_repository_service)
):
    """Browse public repositories; q matches name, description or tags (case-insensitive)"""
    if sort_by not in SORT_OPTIONS:
        raise HTTPException(status_code=400, detail=f"sort_by must be one of: {', '.join(SORT_OPTIONS)}")
    results = search_repositories(store.get_repositories(), query=q, category=category, tag=tag, sort_by=sort_by)
    if user_data and results:
        starred = service.starred_repository_ids(user_data["id"], [repo.id for repo in results])
        results = [repo.model_copy(update={"is_starred": repo.id in starred}) for repo in results]
    return results


@router.get("/stats", response_model=RepositoryStats)
async def repository_stats(store: RepositoryStore = Depends(get_repository_store)):
    """Counters shown on the home page"""
    return store.get_stats()


@router.post("", response_model=RepositoryResponse, status_code=201)
async def create_repository(
    repo_data: RepositoryCreate,
    user_data: Dict = Depends(get_current_user),
    store: RepositoryStore = Depends(get_repository_store),
    service: RepositoryService = Depends(get_repository_service)
):
    """Create a repository owned by the current user"""
    return store.create_repository(repo_data, user_data, service=service)


@router.get("/{owner}/{name}", response_model=RepositoryResponse)
async def get_repository(
    owner: str,
    name: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: RepositoryService = Depends(get_repository_service)
):
    """Repository detail by owner username and repository name"""
    return service.get_repository_by_owner_and_name(owner, name, viewer=user_data)


@router.post("/{repository_id}/star", status_code=204)
async def star_repository(
    repository_id: str,
    user_data: Dict = Depends(get_current_user),
    store: RepositoryStore = Depends(get_repository_store),
    service: RepositoryService = Depends(get_repository_service)
):
    """Star a repository"""
    check_repository_visible(service.get_repository(repository_id), user_data)
    store.star_repository(repository_id, user_data["id"], service=service)
    return None


@router.delete("/{repository_id}/star", status_code=204)
async def unstar_repository(
    repository_id: str,
    user_data: Dict = Depends(get_current_user),
    store: RepositoryStore = Depends(get_repository_store),
    service: RepositoryService = Depends(get_repository_service)
):
    """Remove the current user's star"""
    store.unstar_repository(repository_id, user_data["id"], service=service)
    return None
