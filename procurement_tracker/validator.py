"""Turns raw form input into a `RequestDraft`.

Only `item_name`, `requestor` and `department` are required. Numbers are
coerced leniently, the way the request form always has: anything that is not
a usable quantity becomes 1 and anything that is not a usable unit cost
becomes 0. Each fallback is kept on the draft as a `Coercion` so callers can
report it.
"""
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from .errors import DraftValidationError
from .models import Coercion, RequestDraft, TransactionType

REQUIRED_FIELDS = ("item_name", "requestor", "department")

DEFAULT_QUANTITY = 1
DEFAULT_COST = Decimal("0")
DEFAULT_TRANSACTION_TYPE = TransactionType.TRADE

# Leading numeric prefix, as parseInt / parseFloat read it
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_DECIMAL_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _fits_float(number) -> bool:
    # the form works in JS numbers; anything past float range is Infinity there
    try:
        return math.isfinite(float(number))
    except (OverflowError, ValueError):
        return False


def parse_quantity(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, (float, Decimal)):
        try:
            value = int(raw)
        except (ValueError, OverflowError, InvalidOperation):
            return None
    else:
        match = _INT_PREFIX.match(_text(raw))
        if not match:
            return None
        try:
            value = int(match.group(1))
        except ValueError:
            # longer than the int string conversion limit
            return None
    return value if _fits_float(value) else None


def parse_cost(raw: Any) -> Decimal | None:
    if isinstance(raw, bool):
        return None
    try:
        if isinstance(raw, (int, float, Decimal)):
            value = Decimal(str(raw))
        else:
            match = _DECIMAL_PREFIX.match(_text(raw))
            if not match:
                return None
            value = Decimal(match.group(1))
    except (InvalidOperation, ValueError):
        return None
    return value if value.is_finite() and _fits_float(value) else None


def coerce_quantity(raw: Any) -> tuple[int, Coercion | None]:
    value = parse_quantity(raw)
    if value is None or value < 1:
        return DEFAULT_QUANTITY, Coercion("quantity", raw, DEFAULT_QUANTITY)
    return value, None


def coerce_cost(raw: Any) -> tuple[Decimal, Coercion | None]:
    value = parse_cost(raw)
    if value is None or value < 0:
        return DEFAULT_COST, Coercion("estimated_cost", raw, DEFAULT_COST)
    return value, None


def coerce_transaction_type(raw: Any) -> tuple[TransactionType, Coercion | None]:
    try:
        return TransactionType(_text(raw).lower()), None
    except ValueError:
        return DEFAULT_TRANSACTION_TYPE, Coercion("transaction_type", raw, DEFAULT_TRANSACTION_TYPE)


def validate_draft(raw: Mapping[str, Any]) -> RequestDraft:
    missing = [name for name in REQUIRED_FIELDS if not _text(raw.get(name))]
    if missing:
        raise DraftValidationError(missing)

    coercions = []

    quantity, note = coerce_quantity(raw.get("quantity", DEFAULT_QUANTITY))
    if note:
        coercions.append(note)

    cost, note = coerce_cost(raw.get("estimated_cost", DEFAULT_COST))
    if note:
        coercions.append(note)
    elif not _fits_float(quantity * cost):
        # unit cost is fine on its own but the line total is not
        coercions.append(Coercion("estimated_cost", raw.get("estimated_cost"), DEFAULT_COST))
        cost = DEFAULT_COST

    # A blank type is the form's untouched default, not a coercion
    raw_type = raw.get("transaction_type")
    if _text(raw_type):
        transaction_type, note = coerce_transaction_type(raw_type)
        if note:
            coercions.append(note)
    else:
        transaction_type = DEFAULT_TRANSACTION_TYPE

    return RequestDraft(
        item_name=_text(raw["item_name"]),
        requestor=_text(raw["requestor"]),
        department=_text(raw["department"]),
        quantity=quantity,
        estimated_cost=cost,
        purpose=_text(raw.get("purpose")),
        budget_code=_text(raw.get("budget_code")),
        link=_text(raw.get("link")) or None,
        transaction_type=transaction_type,
        coercions=tuple(coercions),
    )
