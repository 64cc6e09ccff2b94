"""Batch line validation.

Checks every line before any pricing or calculation happens. All problems
are collected and reported together.
"""

from __future__ import annotations

from decimal import Decimal

from linen_tool.models import BatchLine, DuplicateCategory, InvalidQuantity

# Discrepancies above this share of the quantity sent are flagged
LARGE_DISCREPANCY_PERCENT = Decimal("50")


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_lines(lines: list[BatchLine]) -> list[BatchLine]:
    """Validate quantities and category uniqueness.

    Returns the lines unchanged if all checks pass.
    """
    errors: list[str] = []

    for idx, line in enumerate(lines, start=1):
        label = f"Line {idx} ({line.linen_category_id})"
        for attr in ("quantity_sent", "quantity_received"):
            val = getattr(line, attr)
            if not _is_count(val):
                errors.append(f"{label}: {attr}={val!r} is not a whole number")
            elif val < 0:
                errors.append(f"{label}: negative {attr}={val}")

    if errors:
        raise InvalidQuantity(errors)

    seen: set[str] = set()
    for line in lines:
        if line.linen_category_id in seen:
            raise DuplicateCategory(line.linen_category_id)
        seen.add(line.linen_category_id)

    return lines


def quantity_warnings(lines: list[BatchLine]) -> list[str]:
    """Non-fatal observations about already validated lines."""
    warnings: list[str] = []
    for line in lines:
        if line.quantity_sent == 0:
            warnings.append(f"{line.linen_category_id}: quantity sent is zero")
            continue
        diff = abs(line.quantity_sent - line.quantity_received)
        percent = Decimal(diff) * 100 / Decimal(line.quantity_sent)
        if percent > LARGE_DISCREPANCY_PERCENT:
            warnings.append(
                f"{line.linen_category_id}: large discrepancy detected: "
                f"{percent:.1f}% difference"
            )
    return warnings
