"""Domain rules checked inside the services.

The request schemas already reject most bad input, but the services are also
called directly (scripts, tests), so the invariants live here as well.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from .exceptions import ValidationError

CATEGORY_NAME_MAX_LENGTH = 100
PRODUCT_NAME_MAX_LENGTH = 255
SKU_MAX_LENGTH = 50
PRICE_MAX_DIGITS = 10
PRICE_DECIMAL_PLACES = 2
# Primary keys are 32-bit INTEGER columns
MAX_ID = 2**31 - 1


def require_name(value: Any, *, max_length: int, label: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{label} is required")
    if not 1 <= len(value) <= max_length:
        raise ValidationError(
            f"{label} cannot be empty and must be at most {max_length} characters"
        )
    return value


def require_positive_price(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError("Price is required")
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Price {value!r} is not a valid decimal") from exc
    if not price.is_finite() or price <= 0:
        raise ValidationError("Price must be greater than zero")

    exponent = price.as_tuple().exponent
    if isinstance(exponent, int) and exponent < -PRICE_DECIMAL_PLACES:
        raise ValidationError(f"Price must have at most {PRICE_DECIMAL_PLACES} decimal places")
    if price.adjusted() >= PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES:
        raise ValidationError("Price is too large")
    return price


def is_storable_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= MAX_ID


def optional_sku(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("SKU must be a string")
    if len(value) > SKU_MAX_LENGTH:
        raise ValidationError(f"SKU must be at most {SKU_MAX_LENGTH} characters")
    return value


def require_category_ids(values: Optional[Iterable[int]]) -> list[int]:
    """Return the ids in first-seen order without duplicates."""

    if values is None:
        raise ValidationError("At least one category ID must be provided")
    unique_ids: list[int] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"Category ID {value!r} is not an integer")
        if value not in unique_ids:
            unique_ids.append(value)
    if not unique_ids:
        raise ValidationError("At least one category ID must be provided")
    return unique_ids


def reject_unknown_fields(data: dict, allowed: Iterable[str]) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValidationError("Unknown field(s): " + ", ".join(unknown))
