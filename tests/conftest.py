"""Shared pytest fixtures: an in-memory stand-in for the Supabase query builder and API clients."""
import copy
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.main import app
from app.core.rate_limit import limiter
from app.database.supabase_client import get_supabase
from app.core.dependencies import get_current_user, get_optional_user, get_request_supabase
from app.modules.auth.service import clear_token_cache
from app.modules.repositories.service import RepositoryService
from app.modules.repositories.store import RepositoryStore, get_repository_store


UNIQUE_KEYS = {
    "profiles": [("username",)],
    "repositories": [("owner_id", "name")],
    "stars": [("user_id", "repository_id")],
}

ALICE = {"id": "user-alice", "email": "alice@example.com", "user_metadata": {}}
BOB = {"id": "user-bob", "email": "bob@example.com", "user_metadata": {}}


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = None
        self.payload = None
        self.columns = "*"
        self.filters = []
        self.order_by = None
        self.limit_count = None
        self.offset_count = 0
        self.single_mode = None
        self._negate = False

    # operations
    def select(self, columns="*"):
        self.op = self.op or "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters
    def _add(self, predicate):
        if self._negate:
            self._negate = False
            self.filters.append(lambda row: not predicate(row))
        else:
            self.filters.append(predicate)
        return self

    def eq(self, column, value):
        return self._add(lambda row: row.get(column) == value)

    def in_(self, column, values):
        values = list(values)
        return self._add(lambda row: row.get(column) in values)

    def is_(self, column, value):
        expected = None if value in ("null", None) else value
        return self._add(lambda row: row.get(column) is expected)

    @property
    def not_(self):
        self._negate = True
        return self

    # modifiers
    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def offset(self, count):
        self.offset_count = count
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe_single"
        return self

    def _matches(self, row):
        return all(predicate(row) for predicate in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        keys = [c.strip() for c in self.columns.split(",")]
        return {k: copy.deepcopy(row.get(k)) for k in keys}

    def execute(self):
        self.db.calls.append((self.table, self.op))
        if (self.table, self.op) in self.db.failures:
            raise self.db.failures[(self.table, self.op)]
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for payload in payloads:
                row = dict(payload)
                row.setdefault("id", str(uuid.uuid4()))
                stamp = self.db.now()
                row.setdefault("created_at", stamp)
                row.setdefault("updated_at", stamp)
                self.db.check_unique(self.table, row)
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        matched = [row for row in rows if self._matches(row)]

        if self.op == "update":
            for row in matched:
                candidate = {**row, **self.payload}
                self.db.check_unique(self.table, candidate, ignore=row)
                row.update(self.payload)
                row["updated_at"] = self.db.now()
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if row not in matched]
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        matched = matched[self.offset_count:]
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        data = [self._project(row) for row in matched]

        if self.single_mode == "single":
            if len(data) != 1:
                raise APIError({"message": "JSON object requested, multiple (or no) rows returned",
                                "code": "PGRST116", "hint": None, "details": f"{len(data)} rows"})
            return FakeResponse(data[0])
        if self.single_mode == "maybe_single":
            if not data:
                return None
            return FakeResponse(data[0])
        return FakeResponse(data)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db, self.name, self.params = db, name, params

    def execute(self):
        self.db.calls.append(("rpc", self.name))
        if ("rpc", self.name) in self.db.failures:
            raise self.db.failures[("rpc", self.name)]
        return FakeResponse(self.db.rpc_handlers[self.name](self.params))


class FakeSupabase:
    """Just enough of supabase.Client for the services under test"""

    def __init__(self):
        self.tables = {"profiles": [], "repositories": [], "prompts": [], "stars": []}
        self.failures = {}
        self.calls = []
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.rpc_handlers = {
            "increment_stars_count": lambda params: self._bump_stars(params["repository_id"], 1),
            "decrement_stars_count": lambda params: self._bump_stars(params["repository_id"], -1),
        }

    def now(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    def fail(self, table, op, message="backend unavailable", code="XX000", hint=None):
        self.failures[(table, op)] = APIError({"message": message, "code": code, "hint": hint, "details": None})

    def check_unique(self, table, row, ignore=None):
        for key in UNIQUE_KEYS.get(table, []):
            value = tuple(row.get(k) for k in key)
            if any(v is None for v in value):
                continue
            for existing in self.tables[table]:
                if existing is ignore:
                    continue
                if tuple(existing.get(k) for k in key) == value:
                    raise APIError({
                        "message": f'duplicate key value violates unique constraint "{table}_{"_".join(key)}_key"',
                        "code": "23505",
                        "hint": None,
                        "details": f"Key ({', '.join(key)}) already exists.",
                    })

    def _bump_stars(self, repository_id, delta):
        for repo in self.tables["repositories"]:
            if repo["id"] == repository_id:
                repo["stars_count"] = repo.get("stars_count", 0) + delta
        return None

    # seeding helpers
    def add_profile(self, user_id, username, email):
        self.tables["profiles"].append({"id": user_id, "username": username, "email": email})

    def add_repository(self, owner_id, name, **fields):
        stamp = self.now()
        row = {
            "id": fields.pop("id", str(uuid.uuid4())),
            "name": name,
            "description": "",
            "owner_id": owner_id,
            "is_private": False,
            "tags": [],
            "license": "MIT License",
            "category": "general",
            "stars_count": 0,
            "forks_count": 0,
            "created_at": stamp,
            "updated_at": stamp,
        }
        row.update(fields)
        self.tables["repositories"].append(row)
        return row

    def repository(self, repository_id):
        return next(r for r in self.tables["repositories"] if r["id"] == repository_id)


@pytest.fixture
def fake_db():
    db = FakeSupabase()
    db.add_profile(ALICE["id"], "alice", ALICE["email"])
    db.add_profile(BOB["id"], "bob", BOB["email"])
    return db


@pytest.fixture
def store(fake_db):
    return RepositoryStore(lambda: RepositoryService(fake_db))


@pytest.fixture
def api(fake_db, store):
    """TestClient wired to the fake backend; call api.login(user) / api.logout() to switch identity"""
    clear_token_cache()
    limiter.reset()
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_request_supabase] = lambda: fake_db
    app.dependency_overrides[get_repository_store] = lambda: store
    client = TestClient(app)

    def login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user

    def logout():
        app.dependency_overrides.pop(get_current_user, None)
        app.dependency_overrides[get_optional_user] = lambda: None

    client.login = login
    client.logout = logout
    logout()
    yield client
    app.dependency_overrides.clear()
