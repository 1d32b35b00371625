import json
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sse_starlette.sse import EventSourceResponse

from .config import get_settings
from .errors import RequestNotFound, UnsupportedTransition
from .filters import ALL, filter_by_status
from .lifecycle import apply_transition, available_actions, resolve_target, workflow_summary
from .lookups import LookupCache, LookupClient, get_lookup_cache, get_lookup_client
from .metrics import refresh_status_gauge, requests_created, transitions_total
from .models import ProcurementRequest
from .stats import compute_stats
from .store import RequestRepository, get_store
from .streaming import stream_stats
from .validator import validate_draft

router = APIRouter(tags=["Procurement"])


class DraftPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_name: str | None = Field(None, alias="itemName")
    quantity: Any = None
    estimated_cost: Any = Field(None, alias="estimatedCost")
    purpose: str | None = None
    requestor: str | None = None
    department: str | None = None
    budget_code: str | None = Field(None, alias="budgetCode")
    link: str | None = None
    transaction_type: str | None = Field(None, alias="transactionType")


class TransitionRequest(BaseModel):
    status: str | None = None
    action: str | None = None


def _request_detail(request: ProcurementRequest) -> dict:
    return {
        **request.to_dict(),
        "actions": [{"name": a.name, "label": a.label, "target": a.target.value} for a in available_actions(request.status)],
    }


@router.get("/requests")
async def list_requests(status: str = ALL, store: RequestRepository = Depends(get_store)):
    matching = filter_by_status(store.list(), status)
    return {"filter": status, "count": len(matching), "data": [_request_detail(r) for r in matching]}


@router.post("/requests", status_code=201)
async def create_request(payload: DraftPayload, store: RequestRepository = Depends(get_store)):
    draft = validate_draft(payload.model_dump(exclude_none=True))
    request = store.add_request(draft)
    requests_created.inc()
    refresh_status_gauge(store.list())
    return {"request": _request_detail(request), "warnings": [c.to_dict() for c in draft.coercions]}


@router.get("/requests/{request_id}")
async def request_detail(request_id: str, store: RequestRepository = Depends(get_store)):
    return _request_detail(store.get(request_id))


@router.post("/requests/{request_id}/transitions")
async def transition_request(
    request_id: str, body: TransitionRequest, store: RequestRepository = Depends(get_store)
):
    requested = body.status or body.action
    if not requested:
        raise HTTPException(400, "Provide a target status or an action")

    target = resolve_target(requested)
    try:
        request = apply_transition(store, request_id, target)
    except RequestNotFound:
        transitions_total.labels(target=target.value, outcome="not_found").inc()
        raise
    except UnsupportedTransition:
        transitions_total.labels(target=target.value, outcome="unsupported").inc()
        raise

    transitions_total.labels(target=target.value, outcome="applied").inc()
    refresh_status_gauge(store.list())
    return _request_detail(request)


@router.get("/stats")
async def stats(store: RequestRepository = Depends(get_store)):
    return compute_stats(store.list()).to_dict()


@router.get("/stats/stream")
async def stats_stream(store: RequestRepository = Depends(get_store)):
    interval = get_settings().stream_poll_interval

    async def generate():
        async for data in stream_stats(store, interval):
            yield {"event": "stats", "data": json.dumps(data)}

    return EventSourceResponse(generate())


@router.get("/workflow")
async def workflow():
    return workflow_summary()


@router.get("/lookups")
async def lookups(cache: LookupCache = Depends(get_lookup_cache)):
    return cache.to_dict()


@router.post("/lookups/refresh", status_code=202)
async def refresh_lookups(
    background_tasks: BackgroundTasks,
    cache: LookupCache = Depends(get_lookup_cache),
    client: LookupClient = Depends(get_lookup_client),
):
    background_tasks.add_task(cache.refresh, client)
    return {"status": "refresh_started"}
