from typing import Iterable

from prometheus_client import Counter, Gauge

from .models import ProcurementRequest, RequestStatus
from .stats import compute_stats

requests_created = Counter("procurement_requests_created_total", "Procurement requests created")
transitions_total = Counter(
    "procurement_transitions_total", "Status transitions attempted", ["target", "outcome"]
)
lookup_failures = Counter("procurement_lookup_failures_total", "Failed lookup list loads", ["lookup"])
requests_by_status = Gauge("procurement_requests", "Requests currently in each status", ["status"])


def refresh_status_gauge(requests: Iterable[ProcurementRequest]) -> None:
    stats = compute_stats(requests)
    requests_by_status.labels(status=RequestStatus.PENDING.value).set(stats.pending)
    requests_by_status.labels(status=RequestStatus.IN_REVIEW.value).set(stats.in_review)
    requests_by_status.labels(status=RequestStatus.APPROVED.value).set(stats.approved)
    requests_by_status.labels(status=RequestStatus.REJECTED.value).set(stats.rejected)
