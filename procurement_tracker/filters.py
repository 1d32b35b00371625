from typing import Sequence

from .errors import InvalidStatusFilter
from .models import ProcurementRequest, RequestStatus

ALL = "all"


def filter_by_status(
    requests: Sequence[ProcurementRequest], status_filter: str | None = ALL
) -> tuple[ProcurementRequest, ...]:
    """Requests whose status equals the filter, in their original order."""
    if status_filter is None or status_filter == ALL:
        return tuple(requests)
    try:
        status = RequestStatus(status_filter)
    except ValueError:
        raise InvalidStatusFilter(status_filter) from None
    return tuple(r for r in requests if r.status == status)
