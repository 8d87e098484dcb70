"""
In-memory store of the last-loaded public repository list.

Listeners registered with subscribe() are called (with no arguments) after
every change. Any star/unstar reloads the whole list; there is no eviction
or TTL.
"""

import logging
import threading
from typing import Callable, List, Optional, Dict, Any

from app.database.supabase_client import get_supabase
from app.modules.repositories.schemas import RepositoryCreate, RepositoryResponse, RepositoryStats
from app.modules.repositories.service import RepositoryService

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class RepositoryStore:
    def __init__(self, service_factory: Callable[[], RepositoryService]):
        self._service_factory = service_factory
        self._service: Optional[RepositoryService] = None
        self._repositories: List[RepositoryResponse] = []
        self._listeners: List[Listener] = []
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def service(self) -> RepositoryService:
        """Built on first use so the backend client is not created at import/startup"""
        if self._service is None:
            self._service = self._service_factory()
        return self._service

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the matching unsubscribe callable"""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify_listeners(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Repository store listener failed")

    def load(self) -> None:
        """Reload from the backend; on failure the previous list is kept"""
        try:
            repositories = self.service.load_repositories(raise_on_error=True)
        except Exception as e:
            logger.error(f"Failed to load repositories: {e}")
            return
        with self._lock:
            self._repositories = repositories
            self._loaded = True
        self._notify_listeners()

    def get_repositories(self) -> List[RepositoryResponse]:
        if not self._loaded:
            self.load()
        with self._lock:
            return list(self._repositories)

    def create_repository(
        self,
        repo_data: RepositoryCreate,
        user_data: Dict[str, Any],
        service: Optional[RepositoryService] = None
    ) -> RepositoryResponse:
        """Mutations take the caller's service so they run as that user; reloads use the store's own"""
        try:
            new_repo = (service or self.service).create_repository(repo_data, user_data)
        except Exception as e:
            logger.error(f"Failed to create repository: {e}")
            raise
        if not new_repo.is_private:
            with self._lock:
                self._repositories.insert(0, new_repo)
        self._notify_listeners()
        return new_repo

    def star_repository(self, repository_id: str, user_id: str, service: Optional[RepositoryService] = None) -> None:
        try:
            (service or self.service).star_repository(repository_id, user_id)
        except Exception as e:
            logger.error(f"Failed to star repository: {e}")
            raise
        self.load()

    def unstar_repository(self, repository_id: str, user_id: str, service: Optional[RepositoryService] = None) -> None:
        try:
            (service or self.service).unstar_repository(repository_id, user_id)
        except Exception as e:
            logger.error(f"Failed to unstar repository: {e}")
            raise
        self.load()

    def get_stats(self) -> RepositoryStats:
        repositories = self.get_repositories()
        return RepositoryStats(
            total_repos=len(repositories),
            # Tag count stands in for prompt count; the list query does not load prompts.
            total_prompts=sum(len(repo.tags) for repo in repositories),
            total_contributors=len({repo.owner_id for repo in repositories}),
        )


_store: Optional[RepositoryStore] = None


def get_repository_store() -> RepositoryStore:
    global _store
    if _store is None:
        _store = RepositoryStore(lambda: RepositoryService(get_supabase()))
    return _store


def reset_repository_store() -> None:
    global _store
    _store = None
