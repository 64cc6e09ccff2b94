"""Unit price resolution for batch lines."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Optional

from linen_tool.models import (
    BatchLine,
    CategoryInactive,
    CategoryNotFound,
    LinenCategory,
)


def resolve_price(
    line: BatchLine,
    categories: Optional[Mapping[str, LinenCategory]] = None,
) -> Decimal:
    """Return the unit price for a line.

    A non-negative override on the line wins. Otherwise the category's
    current price is used, which requires the category to exist and be active.
    """
    if line.price_per_item is not None and line.price_per_item >= 0:
        return Decimal(str(line.price_per_item))

    category = (categories or {}).get(line.linen_category_id)
    if category is None:
        raise CategoryNotFound(line.linen_category_id)
    if not category.is_active:
        raise CategoryInactive(line.linen_category_id)
    return category.price_per_item
