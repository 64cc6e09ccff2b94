"""Pricing, reconciliation and reporting engines."""
from linen_tool.engine.pricing import resolve_price
from linen_tool.engine.validator import validate_lines, quantity_warnings
from linen_tool.engine.calculator import (
    compute_line_reconciliation,
    compute_batch_invoice,
    summarize_batch,
)
from linen_tool.engine.batches import recompute_totals, replace_lines, diff_lines
from linen_tool.engine.periods import make_period, parse_month, period_date_range
from linen_tool.engine.reports import aggregate_client_period, monthly_stats

__all__ = [
    "resolve_price",
    "validate_lines",
    "quantity_warnings",
    "compute_line_reconciliation",
    "compute_batch_invoice",
    "summarize_batch",
    "recompute_totals",
    "replace_lines",
    "diff_lines",
    "make_period",
    "parse_month",
    "period_date_range",
    "aggregate_client_period",
    "monthly_stats",
]
