from datetime import date
from decimal import Decimal

import pytest

from procurement_tracker.errors import InvalidStatusFilter
from procurement_tracker.filters import filter_by_status
from procurement_tracker.models import ProcurementRequest, RequestStatus
from procurement_tracker.stats import compute_stats
from procurement_tracker.store import SAMPLE_REQUESTS


def make(request_id, status, quantity, cost):
    return ProcurementRequest(
        id=request_id, item_name="Item", quantity=quantity, estimated_cost=Decimal(cost),
        requestor="Ana Cruz", department="IT", status=status, date_requested=date(2026, 1, 5),
    )


def test_totals_for_pending_and_approved():
    stats = compute_stats([
        make("a", RequestStatus.PENDING, 2, "1000"),
        make("b", RequestStatus.APPROVED, 1, "500"),
    ])
    assert stats.total_value == Decimal("2500")
    assert stats.approved_value == Decimal("500")
    assert stats.to_dict()["total_value"] == 2500


def test_empty_collection():
    stats = compute_stats([])
    assert stats.total == 0
    assert stats.total_value == Decimal("0")
    assert stats.active == 0


def test_counts_add_up_for_sample_data():
    stats = compute_stats(SAMPLE_REQUESTS)
    assert stats.total == stats.pending + stats.in_review + stats.approved + stats.rejected == 4
    assert stats.active == 2
    assert stats.total_value == Decimal("5") * 45000 + 2 * 12000 + 10 * 3000 + 3 * 8500
    assert stats.approved_value == Decimal("24000")


def test_sums_are_exact():
    stats = compute_stats([make(str(i), RequestStatus.APPROVED, 3, "0.10") for i in range(10)])
    assert stats.approved_value == Decimal("3.00")
    assert stats.to_dict()["approved_value"] == 3


def test_filter_all_returns_input_unchanged():
    assert filter_by_status(SAMPLE_REQUESTS, "all") == SAMPLE_REQUESTS
    assert filter_by_status(SAMPLE_REQUESTS, None) == SAMPLE_REQUESTS


def test_filter_keeps_order():
    requests = [
        make("a", RequestStatus.PENDING, 1, "1"),
        make("b", RequestStatus.APPROVED, 1, "1"),
        make("c", RequestStatus.PENDING, 1, "1"),
    ]
    assert [r.id for r in filter_by_status(requests, "pending")] == ["a", "c"]


def test_filter_with_no_match_is_empty():
    requests = [make("a", RequestStatus.PENDING, 1, "1")]
    assert filter_by_status(requests, "in-review") == ()


def test_unknown_filter_is_rejected():
    with pytest.raises(InvalidStatusFilter):
        filter_by_status(SAMPLE_REQUESTS, "archived")
