"""Tests for canonical data models."""

import pytest
from datetime import date
from decimal import Decimal

from linen_tool.models import (
    Batch,
    BatchLine,
    BatchStatus,
    CategoryNotFound,
    InvalidQuantity,
    LinenCategory,
    LinenServiceError,
    PeriodFilter,
)


class TestBatchLine:
    def test_received_defaults_to_sent(self):
        line = BatchLine(linen_category_id="sheet", quantity_sent=12)
        assert line.quantity_received == 12
        assert not line.has_discrepancy

    def test_explicit_zero_received_kept(self):
        line = BatchLine(linen_category_id="sheet", quantity_sent=12, quantity_received=0)
        assert line.quantity_received == 0
        assert line.has_discrepancy


class TestLinenCategory:
    def test_negative_price_raises(self):
        with pytest.raises(ValueError, match="must not be negative"):
            LinenCategory(id="x", name="Sheet", price_per_item=Decimal("-1"))

    def test_zero_price_allowed(self):
        cat = LinenCategory(id="x", name="Sample", price_per_item=Decimal("0"))
        assert cat.is_active


class TestBatch:
    def test_derived_fields_not_constructor_args(self):
        with pytest.raises(TypeError):
            Batch(id="b", client_id="c", pickup_date=date(2025, 1, 1), total_amount=Decimal("5"))

    def test_defaults(self):
        batch = Batch(id="b", client_id="c", pickup_date=date(2025, 1, 1))
        assert batch.status is BatchStatus.PICKUP
        assert batch.total_amount == Decimal("0")
        assert batch.has_discrepancy is False

    def test_item_counts(self):
        batch = Batch(
            id="b", client_id="c", pickup_date=date(2025, 1, 1),
            lines=[
                BatchLine(linen_category_id="a", quantity_sent=10, quantity_received=8),
                BatchLine(linen_category_id="b", quantity_sent=5),
            ],
        )
        assert batch.total_items_sent == 15
        assert batch.total_items_received == 13


class TestBatchStatus:
    def test_linear_flow(self):
        assert BatchStatus.PICKUP.next() is BatchStatus.WASHING
        assert BatchStatus.WASHING.next() is BatchStatus.COMPLETED
        assert BatchStatus.COMPLETED.next() is BatchStatus.DELIVERED
        assert BatchStatus.DELIVERED.next() is None

    def test_terminal(self):
        assert BatchStatus.DELIVERED.is_terminal
        assert not BatchStatus.WASHING.is_terminal


class TestPeriodFilter:
    def test_labels(self):
        assert PeriodFilter(2025, 3).label == "2025-03"
        assert PeriodFilter(2025).label == "2025"


class TestErrors:
    def test_invalid_quantity_message(self):
        e = InvalidQuantity(["err1", "err2"])
        assert "2 error(s)" in str(e)
        assert "err1" in str(e)
        assert "err2" in str(e)
        assert e.errors == ["err1", "err2"]
        assert isinstance(e, LinenServiceError)

    def test_category_not_found(self):
        e = CategoryNotFound("cat-9")
        assert e.category_id == "cat-9"
        assert e.error_type == "category_not_found"
        assert "cat-9" in str(e)
