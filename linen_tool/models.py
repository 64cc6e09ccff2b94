"""Canonical data model for the linen service invoicing system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class BatchStatus(Enum):
    PICKUP = "pickup"
    WASHING = "washing"
    COMPLETED = "completed"
    DELIVERED = "delivered"

    def next(self) -> Optional[BatchStatus]:
        """Following status in the default linear flow, None after delivery."""
        order = list(BatchStatus)
        idx = order.index(self)
        return order[idx + 1] if idx + 1 < len(order) else None

    @property
    def is_terminal(self) -> bool:
        return self is BatchStatus.DELIVERED


@dataclass(frozen=True)
class LinenCategory:
    """A priced kind of linen item (sheet, towel, pillow case...)."""
    id: str
    name: str
    price_per_item: Decimal
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.price_per_item < 0:
            raise ValueError(
                f"Category '{self.name}' price must not be negative, got {self.price_per_item}"
            )


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    email: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True


@dataclass
class BatchLine:
    """One linen category within a batch.

    ``quantity_received`` falls back to ``quantity_sent`` when it is not
    supplied. ``price_per_item`` is either an explicit override or the
    category price frozen onto the line when the batch was written.
    """
    linen_category_id: str
    quantity_sent: int
    quantity_received: Optional[int] = None
    price_per_item: Optional[Decimal] = None
    express_delivery: bool = False
    discrepancy_details: Optional[str] = None

    def __post_init__(self) -> None:
        if self.quantity_received is None:
            self.quantity_received = self.quantity_sent

    @property
    def has_discrepancy(self) -> bool:
        return self.quantity_sent != self.quantity_received


@dataclass
class Batch:
    """One pickup-to-delivery cycle of linen for a client.

    ``total_amount`` and ``has_discrepancy`` are derived from ``lines`` and
    are only set by ``linen_tool.engine.batches.recompute_totals``.
    """
    id: str
    client_id: str
    pickup_date: date
    lines: list[BatchLine] = field(default_factory=list)
    status: BatchStatus = BatchStatus.PICKUP
    paper_batch_id: Optional[str] = None
    client_name: Optional[str] = None
    notes: Optional[str] = None

    total_amount: Decimal = field(default=Decimal("0"), init=False)
    has_discrepancy: bool = field(default=False, init=False)

    @property
    def total_items_sent(self) -> int:
        return sum(line.quantity_sent for line in self.lines)

    @property
    def total_items_received(self) -> int:
        return sum(line.quantity_received for line in self.lines)


@dataclass(frozen=True)
class ReconciledLine:
    """A batch line after pricing, discrepancy and surcharge calculation."""
    linen_category_id: str
    quantity_sent: int
    quantity_received: int
    price_per_item: Decimal
    express_delivery: bool
    line_total: Decimal
    discrepancy: int
    discrepancy_value: Decimal
    surcharge: Decimal
    line_adjusted_total: Decimal
    discrepancy_details: Optional[str] = None

    @property
    def has_discrepancy(self) -> bool:
        return self.discrepancy != 0


@dataclass(frozen=True)
class BatchInvoice:
    """Batch-level money totals. VAT is applied once, to the adjusted subtotal."""
    lines: list[ReconciledLine]
    vat_rate: Decimal
    subtotal_received: Decimal
    total_discrepancy_value: Decimal
    total_surcharge: Decimal
    adjusted_subtotal: Decimal
    vat: Decimal
    total: Decimal
    has_discrepancy: bool


@dataclass(frozen=True)
class PeriodFilter:
    """A reporting window: one calendar month, or a whole year when month is None."""
    year: int
    month: Optional[int] = None

    @property
    def label(self) -> str:
        if self.month is None:
            return f"{self.year:04d}"
        return f"{self.year:04d}-{self.month:02d}"


@dataclass
class ClientInvoiceSummary:
    client_id: str
    client_name: str
    total_items_washed: int = 0
    total_amount: Decimal = Decimal("0")
    batch_count: int = 0
    discrepancy_batches: int = 0


@dataclass(frozen=True)
class BatchSummary:
    """Quantity and price statistics shown alongside a batch."""
    total_items_sent: int
    total_items_received: int
    discrepancy_count: int
    discrepancy_percentage: Decimal
    average_item_price: Decimal


@dataclass(frozen=True)
class ClientRevenue:
    client_id: str
    client_name: str
    batch_count: int
    total_revenue: Decimal


@dataclass(frozen=True)
class CategoryVolume:
    category_id: str
    category_name: str
    total_quantity: int


@dataclass
class MonthlyStats:
    period: PeriodFilter
    total_batches: int
    total_revenue: Decimal
    total_items_processed: int
    average_batch_value: Decimal
    completed_batches: int
    pending_batches: int
    discrepancy_count: int
    discrepancy_percentage: Decimal
    top_clients: list[ClientRevenue] = field(default_factory=list)
    top_categories: list[CategoryVolume] = field(default_factory=list)
    batch_growth: Decimal = Decimal("0")
    revenue_growth: Decimal = Decimal("0")
    items_growth: Decimal = Decimal("0")


# --- Errors ---

class LinenServiceError(Exception):
    """Base class for every bad-input failure raised by the linen engine.

    Carries the list of individual problems so callers can report all of
    them at once.
    """
    error_type = "service_error"

    def __init__(self, errors: list[str], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or "\n".join(errors))


class CategoryNotFound(LinenServiceError):
    error_type = "category_not_found"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__([f"Linen category {category_id} does not exist"])


class CategoryInactive(LinenServiceError):
    error_type = "category_inactive"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__([f"Linen category {category_id} is inactive"])


class DuplicateCategory(LinenServiceError):
    error_type = "duplicate_category"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__([f"Linen category {category_id} appears more than once in the batch"])


class InvalidQuantity(LinenServiceError):
    """Raised when one or more batch lines carry negative or non-integer quantities."""
    error_type = "invalid_quantity"

    def __init__(self, errors: list[str]):
        super().__init__(
            errors,
            f"Quantity validation failed with {len(errors)} error(s):\n"
            + "\n".join(f"  - {e}" for e in errors),
        )


class InvalidPeriod(LinenServiceError):
    error_type = "invalid_period"

    def __init__(self, message: str):
        super().__init__([message])


class BatchNotFound(LinenServiceError):
    error_type = "not_found"

    def __init__(self, batch_id: str):
        self.batch_id = batch_id
        super().__init__([f"Batch {batch_id} not found"])


class DuplicatePaperBatchId(LinenServiceError):
    error_type = "duplicate_batch_id"

    def __init__(self, paper_batch_id: str):
        self.paper_batch_id = paper_batch_id
        super().__init__([f"Paper batch ID {paper_batch_id} already exists"])


class ClientNotFound(LinenServiceError):
    error_type = "not_found"

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__([f"Client {client_id} not found"])


class InvalidCategory(LinenServiceError):
    error_type = "invalid_category"

    def __init__(self, message: str):
        super().__init__([message])


class InvalidClient(LinenServiceError):
    error_type = "invalid_client"

    def __init__(self, message: str):
        super().__init__([message])
