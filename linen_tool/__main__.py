"""CLI entry point.

Usage:
    python -m linen_tool invoice <batch-id> --data seed.json --audit-out Audit.json
    python -m linen_tool report --data seed.json --month 2025-01
    python -m linen_tool report --data seed.json --year 2025
    python -m linen_tool stats --data seed.json --month 2025-01
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

import typer

from linen_tool.config import LinenConfig, configure_logging, load_config
from linen_tool.models import LinenServiceError, PeriodFilter

app = typer.Typer(help="Linen service batch invoicing and reports.", no_args_is_help=True)


def _open_store(data: Optional[str], config: LinenConfig, vat_rate: Optional[float] = None):
    from linen_tool.store import BatchStore

    path = data or config.data_file
    if not path:
        typer.echo("ERROR: No data file given (use --data or set LINEN_DATA_FILE)", err=True)
        raise typer.Exit(1)
    rate = Decimal(str(vat_rate)) if vat_rate is not None else config.vat_rate
    try:
        return BatchStore.from_file(path, vat_rate=rate, surcharge_rate=config.express_surcharge)
    except (OSError, ValueError, KeyError, ArithmeticError) as e:
        typer.echo(f"\nFATAL ERROR: could not load {path}: {e}", err=True)
        raise typer.Exit(1)


def _fail(e: LinenServiceError) -> None:
    typer.echo("\nFAILED:", err=True)
    for error in e.errors:
        typer.echo(f"  ERROR: {error}", err=True)


def _resolve_period(month: Optional[str], year: Optional[int]) -> PeriodFilter:
    from linen_tool.engine import make_period, parse_month

    if month:
        return parse_month(month)
    if year is None:
        typer.echo("ERROR: Pass --month YYYY-MM or --year YYYY", err=True)
        raise typer.Exit(1)
    return make_period(year)


@app.command()
def invoice(
    batch_id: str = typer.Argument(..., help="Batch id"),
    data: Optional[str] = typer.Option(None, "--data", help="Path to JSON seed file"),
    vat_rate: Optional[float] = typer.Option(None, "--vat-rate", help="VAT rate (default: LINEN_VAT_RATE or 0.15)"),
    audit_out: Optional[str] = typer.Option(None, "--audit-out", help="Write an audit JSON file here"),
) -> None:
    """Print the invoice for one batch."""
    from linen_tool.audit import generate_audit
    from linen_tool.engine import compute_batch_invoice

    config = load_config()
    configure_logging(config.log_level)

    try:
        store = _open_store(data, config, vat_rate)
        batch = store.get_batch(batch_id)
        result = compute_batch_invoice(batch, vat_rate=store.vat_rate, surcharge_rate=store.surcharge_rate)
    except LinenServiceError as e:
        _fail(e)
        raise typer.Exit(1)

    categories = store.categories
    typer.echo(f"Batch {batch.paper_batch_id or batch.id} - {batch.client_name or batch.client_id}")
    typer.echo(f"Pickup: {batch.pickup_date.isoformat()}  Status: {batch.status.value}")
    typer.echo("")
    for line in result.lines:
        name = categories[line.linen_category_id].name if line.linen_category_id in categories else line.linen_category_id
        marker = f" ({line.discrepancy:+d})" if line.discrepancy else ""
        express = " EXPRESS" if line.express_delivery else ""
        typer.echo(
            f"  {name}: {line.quantity_received}{marker} x {line.price_per_item} = "
            f"{line.line_total}{express} -> {line.line_adjusted_total}"
        )

    typer.echo("")
    typer.echo(f"  Subtotal (Received):    {result.subtotal_received}")
    if result.total_discrepancy_value:
        typer.echo(f"  Discrepancy Adjustment: {result.total_discrepancy_value}")
    if result.total_surcharge:
        typer.echo(f"  Express Delivery:       {result.total_surcharge}")
    typer.echo(f"  Subtotal (Adjusted):    {result.adjusted_subtotal}")
    typer.echo(f"  VAT ({result.vat_rate * 100:.0f}%):              {result.vat}")
    typer.echo(f"\n  TOTAL: {result.total}")

    if audit_out:
        generate_audit(batch, result, audit_out, categories)
        typer.echo(f"\nAudit file saved to: {audit_out}")


@app.command()
def report(
    data: Optional[str] = typer.Option(None, "--data", help="Path to JSON seed file"),
    month: Optional[str] = typer.Option(None, "--month", help="Month as YYYY-MM"),
    year: Optional[int] = typer.Option(None, "--year", help="Whole year instead of a month"),
    client_id: Optional[str] = typer.Option(None, "--client-id", help="Only this client"),
) -> None:
    """Print the per-client invoice summary for a month or a year."""
    from linen_tool.engine import aggregate_client_period, period_date_range

    config = load_config()
    configure_logging(config.log_level)

    try:
        period = _resolve_period(month, year)
        store = _open_store(data, config)
        start, end = period_date_range(period)
        rows = aggregate_client_period(store.list_batches(start, end, client_id), period)
    except LinenServiceError as e:
        _fail(e)
        raise typer.Exit(1)

    typer.echo(f"Invoice summary {period.label} ({start} to {end})")
    if not rows:
        typer.echo("  No batches in period.")
        return
    for row in rows:
        typer.echo(
            f"  {row.client_name}: {row.batch_count} batch(es), "
            f"{row.total_items_washed} items, {row.total_amount} "
            f"[{row.discrepancy_batches} with discrepancy]"
        )
    total = sum((r.total_amount for r in rows), Decimal("0.00"))
    typer.echo(f"\n  TOTAL: {total}")


@app.command()
def stats(
    month: str = typer.Option(..., "--month", help="Month as YYYY-MM"),
    data: Optional[str] = typer.Option(None, "--data", help="Path to JSON seed file"),
) -> None:
    """Print monthly statistics with month-over-month growth."""
    from linen_tool.engine import monthly_stats, parse_month, period_date_range
    from linen_tool.engine.periods import previous_month

    config = load_config()
    configure_logging(config.log_level)

    try:
        period = parse_month(month)
        store = _open_store(data, config)
        current = store.list_batches(*period_date_range(period))
        previous = store.list_batches(*period_date_range(previous_month(period)))
        result = monthly_stats(current, previous, period, store.categories)
    except LinenServiceError as e:
        _fail(e)
        raise typer.Exit(1)

    typer.echo(f"Statistics for {period.label}")
    typer.echo(f"  Batches:      {result.total_batches} ({result.batch_growth:+}% vs previous month)")
    typer.echo(f"  Revenue:      {result.total_revenue} ({result.revenue_growth:+}%)")
    typer.echo(f"  Items:        {result.total_items_processed} ({result.items_growth:+}%)")
    typer.echo(f"  Avg batch:    {result.average_batch_value}")
    typer.echo(f"  Delivered:    {result.completed_batches}  Pending: {result.pending_batches}")
    typer.echo(f"  Discrepancy:  {result.discrepancy_count} ({result.discrepancy_percentage}%)")
    if result.top_clients:
        typer.echo("\n  Top clients:")
        for c in result.top_clients:
            typer.echo(f"    {c.client_name}: {c.total_revenue} ({c.batch_count} batches)")
    if result.top_categories:
        typer.echo("\n  Top categories:")
        for cat in result.top_categories:
            typer.echo(f"    {cat.category_name}: {cat.total_quantity}")


if __name__ == "__main__":
    app()
