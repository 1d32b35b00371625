from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .models import ProcurementRequest, RequestStatus, json_value


@dataclass(frozen=True)
class RequestStats:
    total: int = 0
    pending: int = 0
    in_review: int = 0
    approved: int = 0
    rejected: int = 0
    total_value: Decimal = Decimal("0")
    approved_value: Decimal = Decimal("0")

    @property
    def active(self) -> int:
        return self.pending + self.in_review

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "pending": self.pending,
            "in_review": self.in_review,
            "approved": self.approved,
            "rejected": self.rejected,
            "active": self.active,
            "total_value": json_value(self.total_value),
            "approved_value": json_value(self.approved_value),
        }


def compute_stats(requests: Iterable[ProcurementRequest]) -> RequestStats:
    """Counts per status and exact monetary totals over the whole collection."""
    counts = {status: 0 for status in RequestStatus}
    total_value = Decimal("0")
    approved_value = Decimal("0")

    for request in requests:
        counts[request.status] += 1
        total_value += request.total_cost
        if request.status == RequestStatus.APPROVED:
            approved_value += request.total_cost

    return RequestStats(
        total=sum(counts.values()),
        pending=counts[RequestStatus.PENDING],
        in_review=counts[RequestStatus.IN_REVIEW],
        approved=counts[RequestStatus.APPROVED],
        rejected=counts[RequestStatus.REJECTED],
        total_value=total_value,
        approved_value=approved_value,
    )
