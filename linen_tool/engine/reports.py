"""Client period aggregation and monthly statistics.

Works on batches whose ``total_amount`` / ``has_discrepancy`` have already
been recomputed from their lines.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Optional

from linen_tool.engine.calculator import round_money
from linen_tool.engine.periods import in_range, period_date_range
from linen_tool.models import (
    Batch,
    BatchStatus,
    CategoryVolume,
    ClientInvoiceSummary,
    ClientRevenue,
    LinenCategory,
    MonthlyStats,
    PeriodFilter,
)

TOP_N = 5


def batches_in_period(batches: Iterable[Batch], period: PeriodFilter) -> list[Batch]:
    start, end = period_date_range(period)
    return [b for b in batches if in_range(b.pickup_date, start, end)]


def aggregate_client_period(
    batches: Iterable[Batch],
    period: PeriodFilter,
) -> list[ClientInvoiceSummary]:
    """Per-client invoice rows for the period, highest amount first.

    Clients without a batch in the period do not appear.
    """
    by_client: dict[str, ClientInvoiceSummary] = {}

    for batch in batches_in_period(batches, period):
        client_id = batch.client_id or "unknown"
        summary = by_client.get(client_id)
        if summary is None:
            summary = ClientInvoiceSummary(
                client_id=client_id,
                client_name=batch.client_name or "Unknown Client",
            )
            by_client[client_id] = summary

        summary.total_items_washed += batch.total_items_received
        summary.total_amount += batch.total_amount
        summary.batch_count += 1
        if batch.has_discrepancy:
            summary.discrepancy_batches += 1

    return sorted(by_client.values(), key=lambda s: s.total_amount, reverse=True)


def _growth(current: Decimal, previous: Decimal) -> Decimal:
    if previous <= 0:
        return Decimal("0.00")
    return round_money((current - previous) * 100 / previous)


def monthly_stats(
    current: Iterable[Batch],
    previous: Iterable[Batch],
    period: PeriodFilter,
    categories: Optional[Mapping[str, LinenCategory]] = None,
) -> MonthlyStats:
    """Headline statistics for one month compared with the month before.

    ``current`` and ``previous`` are the batches already fetched for each
    month; they are not filtered again here.
    """
    current = list(current)
    previous = list(previous)
    categories = categories or {}

    total_batches = len(current)
    total_revenue = sum((b.total_amount for b in current), Decimal("0.00"))
    total_items = sum(b.total_items_received for b in current)
    completed = sum(1 for b in current if b.status is BatchStatus.DELIVERED)
    discrepancies = sum(1 for b in current if b.has_discrepancy)

    clients: dict[str, ClientRevenue] = {}
    for batch in current:
        existing = clients.get(batch.client_id)
        clients[batch.client_id] = ClientRevenue(
            client_id=batch.client_id,
            client_name=batch.client_name or "Unknown Client",
            batch_count=(existing.batch_count if existing else 0) + 1,
            total_revenue=(existing.total_revenue if existing else Decimal("0.00")) + batch.total_amount,
        )
    top_clients = sorted(clients.values(), key=lambda c: c.total_revenue, reverse=True)[:TOP_N]

    volumes: dict[str, int] = {}
    for batch in current:
        for line in batch.lines:
            volumes[line.linen_category_id] = volumes.get(line.linen_category_id, 0) + line.quantity_received
    top_categories = [
        CategoryVolume(
            category_id=cat_id,
            category_name=categories[cat_id].name if cat_id in categories else "Unknown",
            total_quantity=qty,
        )
        for cat_id, qty in sorted(volumes.items(), key=lambda kv: kv[1], reverse=True)[:TOP_N]
    ]

    prev_revenue = sum((b.total_amount for b in previous), Decimal("0.00"))
    prev_items = sum(b.total_items_received for b in previous)

    return MonthlyStats(
        period=period,
        total_batches=total_batches,
        total_revenue=total_revenue,
        total_items_processed=total_items,
        average_batch_value=round_money(total_revenue / total_batches) if total_batches else Decimal("0.00"),
        completed_batches=completed,
        pending_batches=total_batches - completed,
        discrepancy_count=discrepancies,
        discrepancy_percentage=(
            round_money(Decimal(discrepancies) * 100 / total_batches) if total_batches else Decimal("0.00")
        ),
        top_clients=top_clients,
        top_categories=top_categories,
        batch_growth=_growth(Decimal(total_batches), Decimal(len(previous))),
        revenue_growth=_growth(total_revenue, prev_revenue),
        items_growth=_growth(Decimal(total_items), Decimal(prev_items)),
    )
