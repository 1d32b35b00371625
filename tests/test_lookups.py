import asyncio

import requests

from procurement_tracker.config import Settings
from procurement_tracker.lookups import (
    LookupCache, LookupClient, LookupKind, LookupResult, Option, envelope_items, map_departments, map_users,
)

from conftest import FakeResponse, FakeSession

SETTINGS = Settings(lookup_base_url="http://directus.test/", lookup_timeout_seconds=3)


def make_client(routes):
    return LookupClient(SETTINGS, session=FakeSession(routes))


def test_department_mapping_picks_first_present_keys():
    options = map_departments([
        {"department_id": 7, "department_name": "Finance"},
        {"code": "HR", "label": "Human Resources"},
        {"name": "Legal"},
        {"department_name": "No id"},
        {"id": "", "title": ""},
    ])
    assert options == [
        Option("7", "Finance"),
        Option("HR", "Human Resources"),
        Option("Legal", "Legal"),
    ]


def test_empty_string_keys_still_win_over_later_keys():
    # an empty department_id is taken as-is and the record dropped, not replaced by id
    assert map_departments([{"department_id": "", "id": 5, "department_name": "Ops"}]) == []
    assert map_departments([{"department_id": None, "id": 5, "department_name": ""}]) == []
    assert map_departments([{"id": 5}]) == [Option("5", "5")]


def test_user_mapping_joins_names():
    options = map_users([
        {"user_fname": " Ana ", "user_lname": "Cruz"},
        {"user_fname": "Prince"},
        {"user_fname": "", "user_lname": None},
    ])
    assert options == [Option("Ana Cruz", "Ana Cruz"), Option("Prince", "Prince")]


def test_malformed_envelope_is_empty():
    assert envelope_items({"data": {"id": 1}}) == []
    assert envelope_items(["x"]) == []
    assert envelope_items({}) == []
    assert envelope_items({"data": [{"id": 1}, "junk"]}) == [{"id": 1}]


def test_fetch_uses_configured_urls_and_timeout():
    client = make_client({
        "/items/department": FakeResponse(payload={"data": [{"id": "IT", "name": "IT"}]}),
    })
    result = client.fetch(LookupKind.DEPARTMENTS)
    assert result == LookupResult(items=[Option("IT", "IT")])
    assert client.session.calls == [("http://directus.test/items/department", 3)]


def test_fetch_http_failure_becomes_error():
    client = make_client({"/items/user": FakeResponse(status_code=503)})
    result = client.fetch(LookupKind.USERS)
    assert result.items == []
    assert result.error == "Failed to load users: 503"


def test_fetch_transport_and_parse_failures_become_errors():
    client = make_client({
        "/items/user": requests.ConnectionError("connection refused"),
        "/items/department": FakeResponse(body_error=ValueError("Expecting value")),
    })
    assert client.fetch(LookupKind.USERS).error == "connection refused"
    assert client.fetch(LookupKind.DEPARTMENTS).error == "Expecting value"


def test_fetch_error_without_message_gets_a_default():
    client = make_client({"/items/user": requests.Timeout()})
    assert client.fetch(LookupKind.USERS).error == "Unable to load users"


def test_stale_response_does_not_overwrite_newer_state():
    cache = LookupCache()
    old = cache.begin(LookupKind.USERS)
    new = cache.begin(LookupKind.USERS)

    assert cache.resolve(LookupKind.USERS, new, LookupResult(items=[Option("Ana Cruz", "Ana Cruz")]))
    assert not cache.resolve(LookupKind.USERS, old, LookupResult(error="Failed to load users: 500"))

    state = cache.state(LookupKind.USERS)
    assert state.items == [Option("Ana Cruz", "Ana Cruz")]
    assert state.error is None
    assert state.loading is False


def test_failure_keeps_previous_items_and_sets_error():
    cache = LookupCache()
    cache.resolve(LookupKind.DEPARTMENTS, cache.begin(LookupKind.DEPARTMENTS), LookupResult(items=[Option("IT", "IT")]))
    cache.resolve(LookupKind.DEPARTMENTS, cache.begin(LookupKind.DEPARTMENTS), LookupResult(error="boom"))
    state = cache.state(LookupKind.DEPARTMENTS)
    assert state.items == [Option("IT", "IT")]
    assert state.error == "boom"


def test_refresh_loads_both_lists_independently():
    cache = LookupCache()
    client = make_client({
        "/items/department": FakeResponse(payload={"data": [{"department_id": 1, "department_name": "Finance"}]}),
        "/items/user": FakeResponse(status_code=500),
    })
    asyncio.run(cache.refresh(client))

    snapshot = cache.to_dict()
    assert snapshot["departments"] == {
        "items": [{"value": "1", "label": "Finance"}], "loading": False, "error": None,
    }
    assert snapshot["users"] == {"items": [], "loading": False, "error": "Failed to load users: 500"}
