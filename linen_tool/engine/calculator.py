"""Batch financial calculation engine.

All monetary calculations use Decimal and are rounded half-up to cents at
every step. ``compute_batch_invoice`` is the only place batch money is
computed: the stored batch total, the invoice view and the reports all go
through it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from linen_tool.engine.pricing import resolve_price
from linen_tool.models import (
    Batch,
    BatchInvoice,
    BatchLine,
    BatchSummary,
    LinenCategory,
    ReconciledLine,
)

CENTS = Decimal("0.01")
DEFAULT_VAT_RATE = Decimal("0.15")
EXPRESS_SURCHARGE_RATE = Decimal("0.5")

Numeric = Union[Decimal, float, int, str]


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, ROUND_HALF_UP)


def to_decimal(value: Numeric) -> Decimal:
    """Convert a number to Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_line_reconciliation(
    line: BatchLine,
    resolved_price: Decimal,
    surcharge_rate: Numeric = EXPRESS_SURCHARGE_RATE,
) -> ReconciledLine:
    """Price one line and work out its discrepancy and express surcharge.

    A positive discrepancy means more items came back than were sent.
    """
    price = to_decimal(resolved_price)
    line_total = round_money(line.quantity_received * price)
    discrepancy = line.quantity_received - line.quantity_sent
    discrepancy_value = round_money(discrepancy * price)
    if line.express_delivery:
        surcharge = round_money(line_total * to_decimal(surcharge_rate))
    else:
        surcharge = Decimal("0.00")
    adjusted = round_money(line_total + discrepancy_value + surcharge)

    return ReconciledLine(
        linen_category_id=line.linen_category_id,
        quantity_sent=line.quantity_sent,
        quantity_received=line.quantity_received,
        price_per_item=price,
        express_delivery=line.express_delivery,
        line_total=line_total,
        discrepancy=discrepancy,
        discrepancy_value=discrepancy_value,
        surcharge=surcharge,
        line_adjusted_total=adjusted,
        discrepancy_details=line.discrepancy_details,
    )


def compute_batch_invoice(
    batch: Union[Batch, Sequence[BatchLine]],
    vat_rate: Numeric = DEFAULT_VAT_RATE,
    categories: Optional[Mapping[str, LinenCategory]] = None,
    surcharge_rate: Numeric = EXPRESS_SURCHARGE_RATE,
) -> BatchInvoice:
    """Build the invoice totals for a batch (or a bare list of its lines).

    Lines without a price are resolved against ``categories``.
    """
    lines = batch.lines if isinstance(batch, Batch) else list(batch)
    rate = to_decimal(vat_rate)

    reconciled = [
        compute_line_reconciliation(line, resolve_price(line, categories), surcharge_rate)
        for line in lines
    ]

    subtotal_received = sum((r.line_total for r in reconciled), Decimal("0.00"))
    total_discrepancy_value = sum((r.discrepancy_value for r in reconciled), Decimal("0.00"))
    total_surcharge = sum((r.surcharge for r in reconciled), Decimal("0.00"))
    adjusted_subtotal = round_money(subtotal_received + total_discrepancy_value + total_surcharge)
    vat = round_money(adjusted_subtotal * rate)
    total = round_money(adjusted_subtotal + vat)

    return BatchInvoice(
        lines=reconciled,
        vat_rate=rate,
        subtotal_received=subtotal_received,
        total_discrepancy_value=total_discrepancy_value,
        total_surcharge=total_surcharge,
        adjusted_subtotal=adjusted_subtotal,
        vat=vat,
        total=total,
        has_discrepancy=any(r.has_discrepancy for r in reconciled),
    )


def summarize_batch(batch: Batch, invoice: BatchInvoice) -> BatchSummary:
    """Quantity statistics for a batch, priced from its invoice."""
    sent = batch.total_items_sent
    received = batch.total_items_received

    if sent > 0:
        discrepancy_pct = round_money(Decimal(sent - received) * 100 / Decimal(sent))
        average_price = round_money(invoice.adjusted_subtotal / Decimal(sent))
    else:
        discrepancy_pct = Decimal("0.00")
        average_price = Decimal("0.00")

    return BatchSummary(
        total_items_sent=sent,
        total_items_received=received,
        discrepancy_count=sum(1 for r in invoice.lines if r.has_discrepancy),
        discrepancy_percentage=discrepancy_pct,
        average_item_price=average_price,
    )
