"""
Invoice arithmetic: line totals, the legacy GST breakdown and invoice totals.

All amounts go through ``round_currency`` so that create, update and the
estimate endpoint produce identical figures for identical input.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import BaseModel

from fleetdesk.core.errors import ValidationError
from fleetdesk.models.billing import BillingItem

logger = logging.getLogger(__name__)

# GST applied by the single-line estimate
GST_RATE = 0.18

_CENT = Decimal("0.01")


class InvoiceTotals(BaseModel):
    billingItems: List[BillingItem]
    totalInvoiceValue: float


def round_currency(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def _valid_amount(value: Any) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _check_positive(quantity: Any, rate: Any) -> None:
    if not _valid_amount(quantity):
        raise ValidationError("Quantity must be greater than 0")
    if not _valid_amount(rate):
        raise ValidationError("Rate must be greater than 0")


def compute_line_total(quantity: float, rate: float) -> float:
    _check_positive(quantity, rate)
    return round_currency(quantity * rate)


def calculate_legacy_amounts(quantity: float, rate: float) -> Dict[str, float]:
    """
    Single line item with GST on top.

    Returns the line total under both names used by clients: ``totalAmount``
    and ``subtotal``.
    """
    subtotal = compute_line_total(quantity, rate)
    tax_amount = round_currency(subtotal * GST_RATE)
    total = round_currency(subtotal + tax_amount)
    return {
        "quantity": quantity,
        "rate": rate,
        "totalAmount": subtotal,
        "subtotal": subtotal,
        "taxRate": GST_RATE,
        "taxAmount": tax_amount,
        "total": total,
    }


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def build_item(item: Any) -> BillingItem:
    """Validate one line item and attach its total."""
    values = {}
    for name in ("description", "hsnSac", "unit"):
        value = _field(item, name)
        value = value.strip() if isinstance(value, str) else value
        if not value:
            raise ValidationError(f"Billing item {name} is required")
        values[name] = value
    quantity = _field(item, "quantity")
    rate = _field(item, "rate")
    return BillingItem(
        quantity=quantity,
        rate=rate,
        totalAmount=compute_line_total(quantity, rate),
        **values,
    )


def aggregate_invoice(items: Iterable[Any]) -> InvoiceTotals:
    """
    Compute every item's total and the invoice value.

    Items may be pydantic models or plain mappings. Running this twice on
    the same input gives the same result.
    """
    built = [build_item(item) for item in items]
    if not built:
        raise ValidationError("At least one billing item is required")
    total = round_currency(sum(item.totalAmount for item in built))
    return InvoiceTotals(billingItems=built, totalInvoiceValue=total)


def fill_item_defaults(item: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Default a partial update item to quantity=1 and rate=0.

    The stored values of the item being replaced are not consulted, so a
    patch carrying only a quantity ends up with rate 0 and is then rejected
    by ``build_item``.
    """
    filled = dict(item)
    missing = [name for name in ("quantity", "rate") if filled.get(name) is None]
    if missing:
        logger.warning(f"Billing item update without {', '.join(missing)}; applying defaults quantity=1, rate=0")
    if filled.get("quantity") is None:
        filled["quantity"] = 1
    if filled.get("rate") is None:
        filled["rate"] = 0
    return filled
