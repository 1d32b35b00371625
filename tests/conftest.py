from datetime import date

import pytest
from fastapi.testclient import TestClient

from procurement_tracker.api import app
from procurement_tracker.lookups import LookupCache, get_lookup_cache
from procurement_tracker.store import InMemoryRequestStore, get_store

TODAY = date(2026, 3, 2)


@pytest.fixture
def store():
    return InMemoryRequestStore(today=lambda: TODAY)


@pytest.fixture
def lookup_cache():
    return LookupCache()


@pytest.fixture
def client(store, lookup_cache):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_lookup_cache] = lambda: lookup_cache
    # no `with`: lifespan (seeding, live lookups) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeResponse:
    def __init__(self, status_code=200, payload=None, body_error=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self._body_error = body_error

    def json(self):
        if self._body_error:
            raise self._body_error
        return self._payload


class FakeSession:
    """Stands in for requests.Session; maps URL suffix to a response or exception."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        for suffix, outcome in self.routes.items():
            if url.endswith(suffix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        return FakeResponse(404)
