"""API routes for the Linen service."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from linen_tool.engine import (
    aggregate_client_period,
    compute_batch_invoice,
    make_period,
    monthly_stats,
    parse_month,
    period_date_range,
    summarize_batch,
)
from linen_tool.engine.batches import LineChanges
from linen_tool.engine.periods import previous_month
from linen_tool.models import (
    Batch,
    BatchLine,
    BatchStatus,
    Client,
    LinenCategory,
    LinenServiceError,
    PeriodFilter,
)
from linen_tool.store import BatchStore

from api.schemas import (
    BatchLineOut,
    BatchOut,
    BatchResponse,
    BatchSummaryOut,
    BulkPriceUpdateRequest,
    CategoryListResponse,
    CategoryOut,
    CategoryResponse,
    CategoryUpdateRequest,
    CategoryVolumeOut,
    ClientBatchesResponse,
    ClientListResponse,
    ClientOut,
    ClientResponse,
    ClientRevenueOut,
    ClientSummaryRow,
    ClientUpdateRequest,
    CreateBatchRequest,
    CreateClientRequest,
    InvoiceLine,
    InvoiceResponse,
    LineChangesOut,
    LineInput,
    ReplaceItemsRequest,
    ReportResponse,
    StatsResponse,
    StatusUpdateRequest,
)

router = APIRouter(prefix="/api/v1")


def get_store(request: Request) -> BatchStore:
    """The store built once at application start-up."""
    return request.app.state.store


def _to_lines(items: list[LineInput]) -> list[BatchLine]:
    return [
        BatchLine(
            linen_category_id=item.linen_category_id,
            quantity_sent=item.quantity_sent,
            quantity_received=item.quantity_received,
            price_per_item=item.price_per_item,
            express_delivery=item.express_delivery,
            discrepancy_details=item.discrepancy_details,
        )
        for item in items
    ]


def _batch_out(batch: Batch) -> BatchOut:
    next_status = batch.status.next()
    return BatchOut(
        id=batch.id,
        paper_batch_id=batch.paper_batch_id,
        client_id=batch.client_id,
        client_name=batch.client_name,
        pickup_date=batch.pickup_date.isoformat(),
        status=batch.status.value,
        next_status=next_status.value if next_status else None,
        is_terminal=batch.status.is_terminal,
        notes=batch.notes,
        total_amount=float(batch.total_amount),
        has_discrepancy=batch.has_discrepancy,
        items=[
            BatchLineOut(
                linen_category_id=line.linen_category_id,
                quantity_sent=line.quantity_sent,
                quantity_received=line.quantity_received,
                price_per_item=float(line.price_per_item) if line.price_per_item is not None else None,
                express_delivery=line.express_delivery,
                discrepancy_details=line.discrepancy_details,
            )
            for line in batch.lines
        ],
    )


def _category_out(category: LinenCategory) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        price_per_item=float(category.price_per_item),
        is_active=category.is_active,
    )


def _client_out(client: Client) -> ClientOut:
    return ClientOut(
        id=client.id,
        name=client.name,
        email=client.email,
        contact_number=client.contact_number,
        address=client.address,
        is_active=client.is_active,
    )


def _changes_out(changes: LineChanges) -> LineChangesOut:
    return LineChangesOut(
        updated=len(changes.updated),
        inserted=len(changes.inserted),
        removed=len(changes.removed),
    )


def _period_from_query(month: str | None, year: int | None) -> PeriodFilter:
    if month:
        return parse_month(month)
    if year is not None:
        return make_period(year)
    today = date.today()
    return make_period(today.year, today.month)


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/batches/{batch_id}", response_model=BatchResponse)
def get_batch(batch_id: str, store: BatchStore = Depends(get_store)):
    return BatchResponse(batch=_batch_out(store.get_batch(batch_id)))


@router.post("/batches", response_model=BatchResponse, status_code=201)
def create_batch(payload: CreateBatchRequest, store: BatchStore = Depends(get_store)):
    """Create a batch at pickup with its initial lines."""
    batch = store.create_batch(
        client_id=payload.client_id,
        pickup_date=payload.pickup_date,
        lines=_to_lines(payload.items),
        paper_batch_id=payload.paper_batch_id,
        notes=payload.notes,
    )
    return BatchResponse(batch=_batch_out(batch))


@router.put("/batches/{batch_id}/items", response_model=BatchResponse)
def replace_items(batch_id: str, payload: ReplaceItemsRequest, store: BatchStore = Depends(get_store)):
    """Replace a batch's lines; existing categories are updated, missing ones removed."""
    batch, changes = store.replace_batch_lines(
        batch_id,
        _to_lines(payload.items),
        notes=payload.notes,
        pickup_date=payload.pickup_date,
    )
    return BatchResponse(batch=_batch_out(batch), changes=_changes_out(changes))


@router.patch("/batches/{batch_id}/status", response_model=BatchResponse)
def update_status(batch_id: str, payload: StatusUpdateRequest, store: BatchStore = Depends(get_store)):
    try:
        status = BatchStatus(payload.status)
    except ValueError:
        valid = ", ".join(s.value for s in BatchStatus)
        raise LinenServiceError([f"Invalid status {payload.status!r}; expected one of: {valid}"])
    batch = store.update_status(batch_id, status, notes=payload.notes)
    return BatchResponse(batch=_batch_out(batch))


@router.get("/batches/{batch_id}/invoice", response_model=InvoiceResponse)
def batch_invoice(batch_id: str, store: BatchStore = Depends(get_store)):
    """Invoice for one batch: per-line reconciliation, VAT and grand total."""
    batch = store.get_batch(batch_id)
    invoice = compute_batch_invoice(batch, vat_rate=store.vat_rate, surcharge_rate=store.surcharge_rate)
    summary = summarize_batch(batch, invoice)
    categories = store.categories

    lines = []
    for line in invoice.lines:
        category = categories.get(line.linen_category_id)
        lines.append(InvoiceLine(
            linen_category_id=line.linen_category_id,
            category_name=category.name if category else None,
            quantity_sent=line.quantity_sent,
            quantity_received=line.quantity_received,
            price_per_item=float(line.price_per_item),
            express_delivery=line.express_delivery,
            line_total=float(line.line_total),
            discrepancy=line.discrepancy,
            discrepancy_value=float(line.discrepancy_value),
            surcharge=float(line.surcharge),
            line_adjusted_total=float(line.line_adjusted_total),
            discrepancy_details=line.discrepancy_details,
        ))

    return InvoiceResponse(
        batch_id=batch.id,
        paper_batch_id=batch.paper_batch_id,
        client_id=batch.client_id,
        client_name=batch.client_name,
        pickup_date=batch.pickup_date.isoformat(),
        status=batch.status.value,
        lines=lines,
        subtotal_received=float(invoice.subtotal_received),
        total_discrepancy_value=float(invoice.total_discrepancy_value),
        total_surcharge=float(invoice.total_surcharge),
        adjusted_subtotal=float(invoice.adjusted_subtotal),
        vat_rate=float(invoice.vat_rate),
        vat=float(invoice.vat),
        total=float(invoice.total),
        has_discrepancy=invoice.has_discrepancy,
        summary=BatchSummaryOut(
            total_items_sent=summary.total_items_sent,
            total_items_received=summary.total_items_received,
            discrepancy_count=summary.discrepancy_count,
            discrepancy_percentage=float(summary.discrepancy_percentage),
            average_item_price=float(summary.average_item_price),
        ),
    )


@router.get("/reports", response_model=ReportResponse)
def invoice_summary(
    month: str | None = Query(None, description="YYYY-MM, defaults to the current month"),
    year: int | None = Query(None, description="Whole-year report"),
    store: BatchStore = Depends(get_store),
):
    """Per-client invoice summary for a month or a year."""
    period = _period_from_query(month, year)
    start, end = period_date_range(period)
    rows = aggregate_client_period(store.list_batches(start, end), period)
    return ReportResponse(
        period=period.label,
        start_date=start,
        end_date=end,
        clients=[
            ClientSummaryRow(
                client_id=r.client_id,
                client_name=r.client_name,
                total_items_washed=r.total_items_washed,
                total_amount=float(r.total_amount),
                batch_count=r.batch_count,
                discrepancy_batches=r.discrepancy_batches,
            )
            for r in rows
        ],
    )


@router.get("/reports/client-batches", response_model=ClientBatchesResponse)
def client_batches(
    client_id: str = Query(..., description="Client id"),
    month: str | None = Query(None, description="YYYY-MM, defaults to the current month"),
    store: BatchStore = Depends(get_store),
):
    store.get_client(client_id)
    period = _period_from_query(month, None)
    start, end = period_date_range(period)
    batches = store.list_batches(start, end, client_id=client_id)
    return ClientBatchesResponse(
        client_id=client_id,
        period=period.label,
        batches=[_batch_out(b) for b in batches],
    )


@router.get("/reports/stats", response_model=StatsResponse)
def stats(
    month: str | None = Query(None, description="YYYY-MM, defaults to the current month"),
    store: BatchStore = Depends(get_store),
):
    """Monthly statistics compared with the previous month."""
    period = _period_from_query(month, None)
    current = store.list_batches(*period_date_range(period))
    previous = store.list_batches(*period_date_range(previous_month(period)))
    result = monthly_stats(current, previous, period, store.categories)
    return StatsResponse(
        period=period.label,
        total_batches=result.total_batches,
        total_revenue=float(result.total_revenue),
        total_items_processed=result.total_items_processed,
        average_batch_value=float(result.average_batch_value),
        completed_batches=result.completed_batches,
        pending_batches=result.pending_batches,
        discrepancy_count=result.discrepancy_count,
        discrepancy_percentage=float(result.discrepancy_percentage),
        top_clients=[
            ClientRevenueOut(
                client_id=c.client_id,
                client_name=c.client_name,
                batch_count=c.batch_count,
                total_revenue=float(c.total_revenue),
            )
            for c in result.top_clients
        ],
        top_categories=[
            CategoryVolumeOut(
                category_id=c.category_id,
                category_name=c.category_name,
                total_quantity=c.total_quantity,
            )
            for c in result.top_categories
        ],
        batch_growth=float(result.batch_growth),
        revenue_growth=float(result.revenue_growth),
        items_growth=float(result.items_growth),
    )


@router.get("/categories", response_model=CategoryListResponse)
def list_categories(
    active_only: bool = Query(False, description="Hide inactive categories"),
    store: BatchStore = Depends(get_store),
):
    return CategoryListResponse(categories=[_category_out(c) for c in store.list_categories(active_only)])


@router.patch("/categories", response_model=CategoryListResponse)
def bulk_update_prices(payload: BulkPriceUpdateRequest, store: BatchStore = Depends(get_store)):
    """Set several category prices in one request."""
    if not payload.updates:
        raise LinenServiceError(["Updates array cannot be empty"])
    updated = store.bulk_update_prices({u.id: u.price for u in payload.updates})
    return CategoryListResponse(categories=[_category_out(c) for c in updated])


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
def update_category(category_id: str, payload: CategoryUpdateRequest, store: BatchStore = Depends(get_store)):
    """Change price, name or active flag. Existing batch lines keep their price."""
    category = store.update_category(
        category_id,
        price=payload.price,
        name=payload.name,
        is_active=payload.is_active,
    )
    return CategoryResponse(category=_category_out(category))


@router.get("/clients", response_model=ClientListResponse)
def list_clients(
    active_only: bool = Query(False, description="Hide inactive clients"),
    store: BatchStore = Depends(get_store),
):
    return ClientListResponse(clients=[_client_out(c) for c in store.list_clients(active_only)])


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(payload: CreateClientRequest, store: BatchStore = Depends(get_store)):
    client = store.create_client(
        name=payload.name,
        email=payload.email,
        contact_number=payload.contact_number,
        address=payload.address,
    )
    return ClientResponse(client=_client_out(client))


@router.patch("/clients/{client_id}", response_model=ClientResponse)
def update_client(client_id: str, payload: ClientUpdateRequest, store: BatchStore = Depends(get_store)):
    client = store.update_client(client_id, **payload.model_dump(exclude_none=True))
    return ClientResponse(client=_client_out(client))
