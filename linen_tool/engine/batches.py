"""Batch line mutation and totals recomputation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Optional

from linen_tool.engine.calculator import (
    DEFAULT_VAT_RATE,
    EXPRESS_SURCHARGE_RATE,
    Numeric,
    compute_batch_invoice,
)
from linen_tool.engine.pricing import resolve_price
from linen_tool.engine.validator import quantity_warnings, validate_lines
from linen_tool.models import Batch, BatchLine, LinenCategory

logger = logging.getLogger(__name__)


@dataclass
class LineChanges:
    """Result of diffing a batch's lines against a replacement set, keyed by category."""
    updated: list[BatchLine] = field(default_factory=list)
    inserted: list[BatchLine] = field(default_factory=list)
    removed: list[BatchLine] = field(default_factory=list)


def recompute_totals(
    batch: Batch,
    vat_rate: Numeric = DEFAULT_VAT_RATE,
    surcharge_rate: Numeric = EXPRESS_SURCHARGE_RATE,
) -> Batch:
    """Set ``total_amount`` and ``has_discrepancy`` from the batch's lines.

    The stored total is the discrepancy and surcharge adjusted subtotal,
    before VAT. Lines must already carry their price.
    """
    invoice = compute_batch_invoice(batch, vat_rate=vat_rate, surcharge_rate=surcharge_rate)
    batch.total_amount = invoice.adjusted_subtotal
    batch.has_discrepancy = invoice.has_discrepancy
    return batch


def price_lines(
    lines: list[BatchLine],
    categories: Optional[Mapping[str, LinenCategory]],
) -> list[BatchLine]:
    """Copy of ``lines`` with every price resolved and frozen onto the line."""
    return [replace(line, price_per_item=resolve_price(line, categories)) for line in lines]


def diff_lines(existing: list[BatchLine], incoming: list[BatchLine]) -> LineChanges:
    current = {line.linen_category_id for line in existing}
    wanted = {line.linen_category_id for line in incoming}

    changes = LineChanges()
    for line in incoming:
        if line.linen_category_id in current:
            changes.updated.append(line)
        else:
            changes.inserted.append(line)
    changes.removed = [line for line in existing if line.linen_category_id not in wanted]
    return changes


def prepare_lines(
    lines: list[BatchLine],
    categories: Optional[Mapping[str, LinenCategory]],
) -> list[BatchLine]:
    """Validate and price incoming lines, logging any quantity anomalies."""
    validate_lines(lines)
    for warning in quantity_warnings(lines):
        logger.warning("Batch line warning: %s", warning)
    return price_lines(lines, categories)


def replace_lines(
    batch: Batch,
    incoming: list[BatchLine],
    categories: Optional[Mapping[str, LinenCategory]],
    vat_rate: Numeric = DEFAULT_VAT_RATE,
    surcharge_rate: Numeric = EXPRESS_SURCHARGE_RATE,
) -> LineChanges:
    """Replace a batch's lines in place and recompute its totals.

    Existing categories are updated, new ones inserted and missing ones
    removed. Line order follows ``incoming``.
    """
    priced = prepare_lines(incoming, categories)
    changes = diff_lines(batch.lines, priced)

    batch.lines = priced
    recompute_totals(batch, vat_rate=vat_rate, surcharge_rate=surcharge_rate)

    logger.info(
        "Batch %s lines replaced: %d updated, %d inserted, %d removed, total=%s",
        batch.id, len(changes.updated), len(changes.inserted), len(changes.removed),
        batch.total_amount,
    )
    return changes
