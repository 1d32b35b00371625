from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable
from uuid import uuid4

import structlog

from .errors import RequestNotFound
from .models import Priority, ProcurementRequest, RequestDraft, RequestStatus

log = structlog.get_logger()


class RequestRepository(ABC):
    """Storage seam for procurement requests.

    Lifecycle and statistics code only talk to this interface, so a
    persistent backend can replace the in-memory one.
    """

    @abstractmethod
    def add_request(self, draft: RequestDraft) -> ProcurementRequest: ...

    @abstractmethod
    def set_status(self, request_id: str, status: RequestStatus) -> ProcurementRequest: ...

    @abstractmethod
    def get(self, request_id: str) -> ProcurementRequest: ...

    @abstractmethod
    def list(self) -> tuple[ProcurementRequest, ...]: ...

    @abstractmethod
    def seed(self, requests: Iterable[ProcurementRequest]) -> int: ...

    @property
    @abstractmethod
    def version(self) -> int: ...


class InMemoryRequestStore(RequestRepository):
    """Most-recent-first list of requests held for the process lifetime."""

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today
        self._requests: list[ProcurementRequest] = []
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def _new_id(self) -> str:
        while True:
            request_id = f"req_{uuid4().hex[:12]}"
            if not any(r.id == request_id for r in self._requests):
                return request_id

    def add_request(self, draft: RequestDraft) -> ProcurementRequest:
        request = ProcurementRequest(
            id=self._new_id(),
            item_name=draft.item_name,
            quantity=draft.quantity,
            estimated_cost=draft.estimated_cost,
            requestor=draft.requestor,
            department=draft.department,
            status=RequestStatus.PENDING,
            date_requested=self._today(),
            purpose=draft.purpose,
            budget_code=draft.budget_code,
            link=draft.link,
            transaction_type=draft.transaction_type,
        )
        self._requests.insert(0, request)
        self._version += 1
        log.info("request_created", request_id=request.id, department=request.department)
        return request

    def set_status(self, request_id: str, status: RequestStatus) -> ProcurementRequest:
        for index, request in enumerate(self._requests):
            if request.id == request_id:
                updated = request.with_status(status)
                self._requests[index] = updated
                self._version += 1
                log.info("request_status_changed", request_id=request_id, old=request.status.value, new=status.value)
                return updated
        raise RequestNotFound(request_id)

    def get(self, request_id: str) -> ProcurementRequest:
        for request in self._requests:
            if request.id == request_id:
                return request
        raise RequestNotFound(request_id)

    def list(self) -> tuple[ProcurementRequest, ...]:
        return tuple(self._requests)

    def seed(self, requests: Iterable[ProcurementRequest]) -> int:
        """Append existing requests as-is (ids, statuses and dates kept).

        Returns how many were new; duplicates by id are skipped.
        """
        added = 0
        for request in requests:
            if any(r.id == request.id for r in self._requests):
                continue
            self._requests.append(request)
            added += 1
        if added:
            self._version += 1
        return added


SAMPLE_REQUESTS = (
    ProcurementRequest(
        id="1",
        item_name="Dell Laptop (i7, 16GB RAM)",
        quantity=5,
        estimated_cost=Decimal("45000"),
        purpose="For new hires in IT support team to handle increased workload",
        requestor="John Smith",
        department="IT",
        priority=Priority.URGENT,
        status=RequestStatus.PENDING,
        date_requested=date(2024, 1, 15),
        budget_code="IT-2024-Q1",
    ),
    ProcurementRequest(
        id="2",
        item_name="Cisco Network Switch (24-port)",
        quantity=2,
        estimated_cost=Decimal("12000"),
        purpose="Upgrade network infrastructure for faster connectivity in building B",
        requestor="Maria Garcia",
        department="IT",
        priority=Priority.ROUTINE,
        status=RequestStatus.APPROVED,
        date_requested=date(2024, 1, 10),
        budget_code="NET-2024-Q1",
    ),
    ProcurementRequest(
        id="3",
        item_name="Microsoft 365 Business License",
        quantity=10,
        estimated_cost=Decimal("3000"),
        purpose="Annual subscription renewal for productivity tools",
        requestor="David Kim",
        department="IT",
        priority=Priority.PLANNED,
        status=RequestStatus.IN_REVIEW,
        date_requested=date(2024, 1, 12),
        budget_code="SW-2024-Q1",
    ),
    ProcurementRequest(
        id="4",
        item_name="HP LaserJet Pro Printer",
        quantity=3,
        estimated_cost=Decimal("8500"),
        purpose="Replace old printers in accounting department",
        requestor="Sarah Wilson",
        department="Finance",
        priority=Priority.ROUTINE,
        status=RequestStatus.REJECTED,
        date_requested=date(2024, 1, 8),
        budget_code="OFFICE-2024-Q1",
    ),
)


# Process-wide store (swap for a persistent RequestRepository when one exists)
_store = InMemoryRequestStore()


def get_store() -> RequestRepository:
    return _store
