"""Pydantic request and response models for the Linen API."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


# --- Requests ---

class LineInput(BaseModel):
    linen_category_id: str
    quantity_sent: int
    quantity_received: int | None = None
    price_per_item: Decimal | None = None
    express_delivery: bool = False
    discrepancy_details: str | None = None


class CreateBatchRequest(BaseModel):
    client_id: str
    pickup_date: date
    items: list[LineInput] = Field(default_factory=list)
    paper_batch_id: str | None = None
    notes: str | None = None


class ReplaceItemsRequest(BaseModel):
    items: list[LineInput]
    notes: str | None = None
    pickup_date: date | None = None


class StatusUpdateRequest(BaseModel):
    status: str
    notes: str | None = None


class CategoryUpdateRequest(BaseModel):
    price: Decimal | None = None
    name: str | None = None
    is_active: bool | None = None


class PriceUpdate(BaseModel):
    id: str
    price: Decimal


class BulkPriceUpdateRequest(BaseModel):
    updates: list[PriceUpdate]


class CreateClientRequest(BaseModel):
    name: str
    email: str | None = None
    contact_number: str | None = None
    address: str | None = None


class ClientUpdateRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    contact_number: str | None = None
    address: str | None = None
    is_active: bool | None = None


# --- Responses ---

class InvoiceLine(BaseModel):
    linen_category_id: str
    category_name: str | None = None
    quantity_sent: int
    quantity_received: int
    price_per_item: float
    express_delivery: bool
    line_total: float
    discrepancy: int
    discrepancy_value: float
    surcharge: float
    line_adjusted_total: float
    discrepancy_details: str | None = None


class BatchSummaryOut(BaseModel):
    total_items_sent: int
    total_items_received: int
    discrepancy_count: int
    discrepancy_percentage: float
    average_item_price: float


class InvoiceResponse(BaseModel):
    success: bool = True
    batch_id: str
    paper_batch_id: str | None = None
    client_id: str
    client_name: str | None = None
    pickup_date: str
    status: str
    lines: list[InvoiceLine]
    subtotal_received: float
    total_discrepancy_value: float
    total_surcharge: float
    adjusted_subtotal: float
    vat_rate: float
    vat: float
    total: float
    has_discrepancy: bool
    summary: BatchSummaryOut


class BatchLineOut(BaseModel):
    linen_category_id: str
    quantity_sent: int
    quantity_received: int
    price_per_item: float | None = None
    express_delivery: bool
    discrepancy_details: str | None = None


class BatchOut(BaseModel):
    id: str
    paper_batch_id: str | None = None
    client_id: str
    client_name: str | None = None
    pickup_date: str
    status: str
    next_status: str | None = None
    is_terminal: bool = False
    notes: str | None = None
    total_amount: float
    has_discrepancy: bool
    items: list[BatchLineOut]


class LineChangesOut(BaseModel):
    updated: int
    inserted: int
    removed: int


class BatchResponse(BaseModel):
    success: bool = True
    batch: BatchOut
    changes: LineChangesOut | None = None


class ClientSummaryRow(BaseModel):
    client_id: str
    client_name: str
    total_items_washed: int
    total_amount: float
    batch_count: int
    discrepancy_batches: int


class ReportResponse(BaseModel):
    success: bool = True
    period: str
    start_date: str
    end_date: str
    clients: list[ClientSummaryRow]


class ClientBatchesResponse(BaseModel):
    success: bool = True
    client_id: str
    period: str
    batches: list[BatchOut]


class ClientRevenueOut(BaseModel):
    client_id: str
    client_name: str
    batch_count: int
    total_revenue: float


class CategoryVolumeOut(BaseModel):
    category_id: str
    category_name: str
    total_quantity: int


class StatsResponse(BaseModel):
    success: bool = True
    period: str
    total_batches: int
    total_revenue: float
    total_items_processed: int
    average_batch_value: float
    completed_batches: int
    pending_batches: int
    discrepancy_count: int
    discrepancy_percentage: float
    top_clients: list[ClientRevenueOut]
    top_categories: list[CategoryVolumeOut]
    batch_growth: float
    revenue_growth: float
    items_growth: float


class ErrorResponse(BaseModel):
    success: bool = False
    error_type: str
    errors: list[str]


class CategoryOut(BaseModel):
    id: str
    name: str
    price_per_item: float
    is_active: bool


class CategoryResponse(BaseModel):
    success: bool = True
    category: CategoryOut


class CategoryListResponse(BaseModel):
    success: bool = True
    categories: list[CategoryOut]


class ClientOut(BaseModel):
    id: str
    name: str
    email: str | None = None
    contact_number: str | None = None
    address: str | None = None
    is_active: bool


class ClientResponse(BaseModel):
    success: bool = True
    client: ClientOut


class ClientListResponse(BaseModel):
    success: bool = True
    clients: list[ClientOut]
