import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

import requests
import structlog

from .config import Settings, get_settings
from .metrics import lookup_failures

log = structlog.get_logger()

DEPARTMENT_VALUE_KEYS = ("department_id", "id", "value", "code", "slug", "department", "title", "name")
DEPARTMENT_LABEL_KEYS = ("department_name", "label", "name", "department", "title")


class LookupKind(str, Enum):
    DEPARTMENTS = "departments"
    USERS = "users"


@dataclass(frozen=True)
class Option:
    value: str
    label: str


@dataclass(frozen=True)
class LookupResult:
    items: list[Option] = field(default_factory=list)
    error: str | None = None


@dataclass
class LookupState:
    items: list[Option] = field(default_factory=list)
    loading: bool = False
    error: str | None = None
    generation: int = 0

    def to_dict(self) -> dict:
        return {
            "items": [{"value": o.value, "label": o.label} for o in self.items],
            "loading": self.loading,
            "error": self.error,
        }


def _first(record: dict, keys: tuple[str, ...], default: str = "") -> str:
    """First key whose value is present and not null; an empty string still wins."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return str(value)
    return default


def envelope_items(payload: Any) -> list[dict]:
    """Records under `data`; anything else counts as an empty list."""
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


def map_departments(records: list[dict]) -> list[Option]:
    options = []
    for record in records:
        value = _first(record, DEPARTMENT_VALUE_KEYS)
        label = _first(record, DEPARTMENT_LABEL_KEYS, default=value)
        if value and label:
            options.append(Option(value, label))
    return options


def map_users(records: list[dict]) -> list[Option]:
    options = []
    for record in records:
        fname = _first(record, ("user_fname",)).strip()
        lname = _first(record, ("user_lname",)).strip()
        full = " ".join(part for part in (fname, lname) if part)
        if full:
            options.append(Option(full, full))
    return options


MAPPERS: dict[LookupKind, Callable[[list[dict]], list[Option]]] = {
    LookupKind.DEPARTMENTS: map_departments,
    LookupKind.USERS: map_users,
}


class LookupClient:
    """Blocking client for the department and user list endpoints."""

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    def url_for(self, kind: LookupKind) -> str:
        if kind == LookupKind.DEPARTMENTS:
            return self.settings.department_url
        return self.settings.user_url

    def fetch(self, kind: LookupKind) -> LookupResult:
        """Never raises; failures come back as `LookupResult.error`."""
        try:
            response = self.session.get(self.url_for(kind), timeout=self.settings.lookup_timeout_seconds)
            if not response.ok:
                return LookupResult(error=f"Failed to load {kind.value}: {response.status_code}")
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            return LookupResult(error=str(e) or f"Unable to load {kind.value}")
        return LookupResult(items=MAPPERS[kind](envelope_items(payload)))


class LookupCache:
    """Latest department and user lists, as the request form consumes them.

    Every load takes a generation token; a result is applied only while its
    token is still the newest for that list.
    """

    def __init__(self):
        self._states = {kind: LookupState() for kind in LookupKind}

    def state(self, kind: LookupKind) -> LookupState:
        return self._states[kind]

    def begin(self, kind: LookupKind) -> int:
        state = self._states[kind]
        state.generation += 1
        state.loading = True
        state.error = None
        return state.generation

    def resolve(self, kind: LookupKind, token: int, result: LookupResult) -> bool:
        state = self._states[kind]
        if token != state.generation:
            log.info("lookup_stale_response_ignored", lookup=kind.value, token=token, current=state.generation)
            return False
        state.loading = False
        if result.error:
            # keep whatever list was loaded before
            state.error = result.error
            lookup_failures.labels(lookup=kind.value).inc()
            log.warning("lookup_failed", lookup=kind.value, error=result.error)
        else:
            state.items = list(result.items)
            state.error = None
            log.info("lookup_loaded", lookup=kind.value, count=len(result.items))
        return True

    async def load(self, client: LookupClient, kind: LookupKind) -> bool:
        token = self.begin(kind)
        result = await asyncio.to_thread(client.fetch, kind)
        return self.resolve(kind, token, result)

    async def refresh(self, client: LookupClient) -> None:
        """Load both lists concurrently."""
        await asyncio.gather(*[self.load(client, kind) for kind in LookupKind])

    def to_dict(self) -> dict:
        return {kind.value: state.to_dict() for kind, state in self._states.items()}


_cache = LookupCache()


def get_lookup_cache() -> LookupCache:
    return _cache


def get_lookup_client() -> LookupClient:
    return LookupClient()
