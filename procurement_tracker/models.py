from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in-review"
    APPROVED = "approved"
    REJECTED = "rejected"


class TransactionType(str, Enum):
    TRADE = "trade"
    NON_TRADE = "non-trade"


class Priority(str, Enum):
    URGENT = "urgent"
    ROUTINE = "routine"
    PLANNED = "planned"


@dataclass(frozen=True)
class Coercion:
    """A draft input that could not be used as given and fell back to a default."""
    field: str
    raw: object
    used: object

    def to_dict(self) -> dict:
        return {"field": self.field, "raw": None if self.raw is None else str(self.raw), "used": json_value(self.used)}


@dataclass(frozen=True)
class RequestDraft:
    item_name: str
    requestor: str
    department: str
    quantity: int = 1
    estimated_cost: Decimal = Decimal("0")
    purpose: str = ""
    budget_code: str = ""
    link: str | None = None
    transaction_type: TransactionType | None = TransactionType.TRADE
    coercions: tuple[Coercion, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class ProcurementRequest:
    id: str
    item_name: str
    quantity: int
    estimated_cost: Decimal
    requestor: str
    department: str
    status: RequestStatus
    date_requested: date
    purpose: str = ""
    budget_code: str = ""
    link: str | None = None
    transaction_type: TransactionType | None = None
    priority: Priority | None = None

    @property
    def total_cost(self) -> Decimal:
        return self.quantity * self.estimated_cost

    def with_status(self, status: RequestStatus) -> "ProcurementRequest":
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_name": self.item_name,
            "quantity": self.quantity,
            "estimated_cost": json_value(self.estimated_cost),
            "total_cost": json_value(self.total_cost),
            "purpose": self.purpose,
            "requestor": self.requestor,
            "department": self.department,
            "status": self.status.value,
            "date_requested": self.date_requested.isoformat(),
            "budget_code": self.budget_code,
            "link": self.link,
            "transaction_type": self.transaction_type.value if self.transaction_type else None,
            "priority": self.priority.value if self.priority else None,
        }


def json_value(value):
    # JSON has no decimal type; whole amounts stay ints
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value() and value.adjusted() < 300:
            return int(value)
        return float(value)
    if isinstance(value, Enum):
        return value.value
    return value
