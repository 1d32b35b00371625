"""Approval workflow for procurement requests.

A request starts `pending`. While pending, an operator can send it to review,
approve it or reject it. Nothing is exposed out of `in-review`, `approved` or
`rejected`; asking for such a move raises `UnsupportedTransition` and leaves
the request untouched.
"""
from dataclasses import dataclass

import structlog

from .errors import UnknownTransitionTarget, UnsupportedTransition
from .models import ProcurementRequest, RequestStatus
from .store import RequestRepository

log = structlog.get_logger()


@dataclass(frozen=True)
class Action:
    name: str
    label: str
    target: RequestStatus


ACTIONS = {
    "review": Action("review", "Review", RequestStatus.IN_REVIEW),
    "approve": Action("approve", "Approve", RequestStatus.APPROVED),
    "reject": Action("reject", "Reject", RequestStatus.REJECTED),
}

TRANSITIONS: dict[RequestStatus, tuple[Action, ...]] = {
    RequestStatus.PENDING: tuple(ACTIONS.values()),
    RequestStatus.IN_REVIEW: (),
    RequestStatus.APPROVED: (),
    RequestStatus.REJECTED: (),
}

INITIAL_STATUS = RequestStatus.PENDING
TERMINAL_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})

STATUS_DESCRIPTIONS = {
    RequestStatus.PENDING: "Initial submission",
    RequestStatus.IN_REVIEW: "Under evaluation",
    RequestStatus.APPROVED: "Ready for procurement",
    RequestStatus.REJECTED: "Request denied",
}


def available_actions(status: RequestStatus) -> tuple[Action, ...]:
    return TRANSITIONS[status]


def resolve_target(value: str) -> RequestStatus:
    """Accept either an action name ("approve") or a status value ("approved")."""
    key = value.strip().lower()
    if key in ACTIONS:
        return ACTIONS[key].target
    try:
        return RequestStatus(key)
    except ValueError:
        raise UnknownTransitionTarget(value) from None


def check_transition(current: RequestStatus, target: RequestStatus) -> RequestStatus:
    if any(action.target == target for action in TRANSITIONS[current]):
        return target
    raise UnsupportedTransition(current.value, target.value)


def apply_transition(store: RequestRepository, request_id: str, target: RequestStatus) -> ProcurementRequest:
    request = store.get(request_id)
    try:
        check_transition(request.status, target)
    except UnsupportedTransition:
        log.warning("transition_rejected", request_id=request_id, current=request.status.value, requested=target.value)
        raise
    return store.set_status(request_id, target)


def workflow_summary() -> list[dict]:
    return [
        {
            "status": status.value,
            "description": STATUS_DESCRIPTIONS[status],
            "initial": status == INITIAL_STATUS,
            "terminal": status in TERMINAL_STATUSES,
            "actions": [{"name": a.name, "label": a.label, "target": a.target.value} for a in actions],
        }
        for status, actions in TRANSITIONS.items()
    ]
