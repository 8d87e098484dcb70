"""
Client-side repository search: case-insensitive substring matching over
name, description and tags, plus the category/tag filters and sort orders
offered by the browse screen.
"""

from datetime import datetime, timezone
from typing import List, Optional

from app.config.catalog import SORT_OPTIONS
from app.modules.repositories.schemas import RepositoryResponse

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def matches_query(repo: RepositoryResponse, query: str) -> bool:
    """query must already be lowercased"""
    if query in repo.name.lower():
        return True
    if query in (repo.description or "").lower():
        return True
    return any(query in tag.lower() for tag in repo.tags)


def _timestamp(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


_SORT_KEYS = {
    "stars": lambda repo: repo.stars_count,
    "forks": lambda repo: repo.forks_count,
    "updated": lambda repo: _timestamp(repo.updated_at),
    "created": lambda repo: _timestamp(repo.created_at),
}


def search_repositories(
    repositories: List[RepositoryResponse],
    query: str = "",
    category: Optional[str] = None,
    tag: Optional[str] = None,
    sort_by: str = "relevance",
) -> List[RepositoryResponse]:
    """Filter then sort. An empty query matches everything; "relevance" keeps input order."""
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {sort_by}")

    # Matched as typed, surrounding spaces included.
    query = (query or "").lower()
    results = [repo for repo in repositories if not query or matches_query(repo, query)]

    if category and category.lower() != "all":
        category = category.lower()
        results = [repo for repo in results if (repo.category or "").lower() == category]

    if tag:
        tag = tag.strip().lower()
        results = [repo for repo in results if tag in (t.lower() for t in repo.tags)]

    key = _SORT_KEYS.get(sort_by)
    if key is not None:
        # sorted() is stable, so ties keep their relevance order
        results = sorted(results, key=key, reverse=True)
    return results
