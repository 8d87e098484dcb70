"""RepositoryStore: cached list, subscriptions and reload-on-mutation."""
import pytest
from fastapi import HTTPException

from app.modules.repositories.schemas import RepositoryCreate
from app.modules.repositories.service import RepositoryService
from app.modules.repositories.store import RepositoryStore
from tests.conftest import ALICE, BOB


def test_first_read_loads_from_backend(fake_db, store):
    fake_db.add_repository(ALICE["id"], "a")
    assert [r.name for r in store.get_repositories()] == ["a"]


def test_get_repositories_returns_a_copy(fake_db, store):
    fake_db.add_repository(ALICE["id"], "a")
    store.get_repositories().clear()
    assert len(store.get_repositories()) == 1


def test_cache_is_not_refreshed_without_mutation(fake_db, store):
    fake_db.add_repository(ALICE["id"], "a")
    store.get_repositories()
    fake_db.add_repository(ALICE["id"], "b")
    assert [r.name for r in store.get_repositories()] == ["a"]


def test_subscribe_and_unsubscribe(fake_db, store):
    calls = []
    unsubscribe = store.subscribe(lambda: calls.append("x"))

    store.load()
    assert calls == ["x"]

    unsubscribe()
    unsubscribe()
    store.load()
    assert calls == ["x"]


def test_failing_listener_does_not_block_others(store):
    calls = []

    def broken():
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda: calls.append("ok"))
    store.load()
    assert calls == ["ok"]


def test_create_puts_public_repository_first_and_notifies(fake_db, store):
    fake_db.add_repository(ALICE["id"], "older")
    store.get_repositories()
    calls = []
    store.subscribe(lambda: calls.append("changed"))

    store.create_repository(RepositoryCreate(name="newer"), BOB)

    assert [r.name for r in store.get_repositories()] == ["newer", "older"]
    assert calls == ["changed"]


def test_create_private_repository_is_not_cached(fake_db, store):
    store.get_repositories()
    store.create_repository(RepositoryCreate(name="secret", is_private=True), ALICE)
    assert store.get_repositories() == []


def test_create_failure_is_reraised_and_cache_kept(fake_db, store):
    fake_db.add_repository(ALICE["id"], "existing")
    store.get_repositories()
    with pytest.raises(HTTPException):
        store.create_repository(RepositoryCreate(name="existing"), ALICE)
    assert [r.name for r in store.get_repositories()] == ["existing"]


def test_star_reloads_counts(fake_db, store):
    repo = fake_db.add_repository(ALICE["id"], "a")
    assert store.get_repositories()[0].stars_count == 0

    store.star_repository(repo["id"], BOB["id"])
    assert store.get_repositories()[0].stars_count == 1

    store.unstar_repository(repo["id"], BOB["id"])
    assert store.get_repositories()[0].stars_count == 0


def test_failed_reload_keeps_previous_list(fake_db, store):
    fake_db.add_repository(ALICE["id"], "a")
    store.get_repositories()

    fake_db.fail("repositories", "select")
    store.load()
    assert [r.name for r in store.get_repositories()] == ["a"]


def test_failed_owner_lookup_keeps_previous_list(fake_db, store):
    fake_db.add_repository(ALICE["id"], "a")
    store.get_repositories()

    fake_db.fail("profiles", "select")
    store.load()
    assert [r.name for r in store.get_repositories()] == ["a"]
    assert store.get_stats().total_repos == 1


def test_failed_reload_after_star_keeps_previous_list(fake_db, store):
    repo = fake_db.add_repository(ALICE["id"], "a")
    store.get_repositories()

    fake_db.fail("repositories", "select")
    store.star_repository(repo["id"], BOB["id"])
    assert [r.name for r in store.get_repositories()] == ["a"]
    assert fake_db.repository(repo["id"])["stars_count"] == 1


def test_failed_first_load_is_retried(fake_db, store):
    fake_db.add_repository(ALICE["id"], "a")
    fake_db.fail("repositories", "select")
    assert store.get_repositories() == []

    fake_db.failures.clear()
    assert [r.name for r in store.get_repositories()] == ["a"]


def test_service_is_built_lazily(fake_db):
    built = []

    def factory():
        built.append(True)
        return RepositoryService(fake_db)

    lazy_store = RepositoryStore(factory)
    lazy_store.subscribe(lambda: None)
    assert built == []
    lazy_store.get_repositories()
    assert built == [True]


def test_stats(fake_db, store):
    fake_db.add_repository(ALICE["id"], "a", tags=["x", "y"])
    fake_db.add_repository(ALICE["id"], "b", tags=["z"])
    fake_db.add_repository(BOB["id"], "c")

    stats = store.get_stats()

    assert stats.total_repos == 3
    assert stats.total_prompts == 3
    assert stats.total_contributors == 2


def test_mutations_use_the_callers_service(fake_db, store):
    repo = fake_db.add_repository(ALICE["id"], "a")
    store.get_repositories()
    caller_service = RepositoryService(fake_db)
    calls = []
    caller_service.star_repository = lambda repository_id, user_id: calls.append((repository_id, user_id))

    store.star_repository(repo["id"], BOB["id"], service=caller_service)

    assert calls == [(repo["id"], BOB["id"])]
    assert fake_db.tables["stars"] == []
