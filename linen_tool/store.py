"""In-process batch store.

Holds categories, clients and batches loaded from a JSON seed file and
serves the two reads the invoicing engine needs: one batch by id, and all
batches picked up within an inclusive date range. Every write recomputes
the batch totals from its lines. Concurrent writes are last-write-wins.

Seed file layout::

    {
      "categories": [{"id": "...", "name": "...", "price_per_item": "2.50", "is_active": true}],
      "clients":    [{"id": "...", "name": "..."}],
      "batches":    [{"id": "...", "client_id": "...", "pickup_date": "2025-01-10",
                      "status": "pickup", "paper_batch_id": "RSL0001",
                      "items": [{"linen_category_id": "...", "quantity_sent": 10,
                                 "quantity_received": 8, "price_per_item": "2.50",
                                 "express_delivery": false}]}]
    }
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional, Union

from linen_tool.batch_ids import next_paper_batch_id
from linen_tool.engine.batches import LineChanges, prepare_lines, recompute_totals, replace_lines
from linen_tool.engine.calculator import DEFAULT_VAT_RATE, EXPRESS_SURCHARGE_RATE, Numeric, to_decimal
from linen_tool.engine.periods import in_range
from linen_tool.models import (
    Batch,
    BatchLine,
    BatchNotFound,
    BatchStatus,
    CategoryNotFound,
    Client,
    ClientNotFound,
    DuplicatePaperBatchId,
    InvalidCategory,
    InvalidClient,
    LinenCategory,
)

logger = logging.getLogger(__name__)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


def line_from_dict(raw: Mapping[str, Any]) -> BatchLine:
    return BatchLine(
        linen_category_id=str(raw["linen_category_id"]),
        quantity_sent=raw.get("quantity_sent", 0),
        quantity_received=raw.get("quantity_received"),
        price_per_item=_decimal(raw.get("price_per_item")),
        express_delivery=bool(raw.get("express_delivery", False)),
        discrepancy_details=raw.get("discrepancy_details"),
    )


class BatchStore:
    """Categories, clients and batches for one process.

    Build it once at start-up and hand it to whatever serves requests.
    """

    def __init__(
        self,
        categories: list[LinenCategory],
        clients: list[Client],
        vat_rate: Numeric = DEFAULT_VAT_RATE,
        surcharge_rate: Numeric = EXPRESS_SURCHARGE_RATE,
    ) -> None:
        self._categories = {c.id: c for c in categories}
        self._clients = {c.id: c for c in clients}
        self._batches: dict[str, Batch] = {}
        self.vat_rate = vat_rate
        self.surcharge_rate = surcharge_rate

    # --- Loading ---

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **kwargs: Any) -> BatchStore:
        categories = [
            LinenCategory(
                id=str(c["id"]),
                name=c["name"],
                price_per_item=_decimal(c.get("price_per_item") or "0"),
                is_active=bool(c.get("is_active", True)),
            )
            for c in data.get("categories", [])
        ]
        clients = [
            Client(
                id=str(c["id"]),
                name=c["name"],
                email=c.get("email"),
                contact_number=c.get("contact_number"),
                address=c.get("address"),
                is_active=bool(c.get("is_active", True)),
            )
            for c in data.get("clients", [])
        ]
        store = cls(categories, clients, **kwargs)

        for raw in data.get("batches", []):
            batch = Batch(
                id=str(raw["id"]),
                client_id=str(raw["client_id"]),
                pickup_date=date.fromisoformat(raw["pickup_date"]),
                lines=prepare_lines([line_from_dict(i) for i in raw.get("items", [])], store._categories),
                status=BatchStatus(raw.get("status", BatchStatus.PICKUP.value)),
                paper_batch_id=raw.get("paper_batch_id"),
                notes=raw.get("notes"),
            )
            store._put(batch)

        logger.info(
            "Loaded %d categories, %d clients, %d batches",
            len(store._categories), len(store._clients), len(store._batches),
        )
        return store

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs: Any) -> BatchStore:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data, **kwargs)

    # --- Reads ---

    @property
    def categories(self) -> dict[str, LinenCategory]:
        return dict(self._categories)

    def list_categories(self, active_only: bool = False) -> list[LinenCategory]:
        found = [c for c in self._categories.values() if c.is_active or not active_only]
        return sorted(found, key=lambda c: c.name.lower())

    def get_category(self, category_id: str) -> LinenCategory:
        category = self._categories.get(category_id)
        if category is None:
            raise CategoryNotFound(category_id)
        return category

    def list_clients(self, active_only: bool = False) -> list[Client]:
        found = [c for c in self._clients.values() if c.is_active or not active_only]
        return sorted(found, key=lambda c: c.name.lower())

    def get_client(self, client_id: str) -> Client:
        client = self._clients.get(client_id)
        if client is None:
            raise ClientNotFound(client_id)
        return client

    def get_batch(self, batch_id: str) -> Batch:
        batch = self._batches.get(batch_id)
        if batch is None:
            raise BatchNotFound(batch_id)
        return batch

    def list_batches(
        self,
        start_date: str,
        end_date: str,
        client_id: Optional[str] = None,
    ) -> list[Batch]:
        """Batches picked up between the two ISO dates, inclusive, oldest first."""
        found = [
            b for b in self._batches.values()
            if in_range(b.pickup_date, start_date, end_date)
            and (client_id is None or b.client_id == client_id)
        ]
        return sorted(found, key=lambda b: (b.pickup_date, b.paper_batch_id or ""))

    # --- Writes ---

    def _put(self, batch: Batch) -> Batch:
        client = self._clients.get(batch.client_id)
        batch.client_name = client.name if client else None
        recompute_totals(batch, vat_rate=self.vat_rate, surcharge_rate=self.surcharge_rate)
        self._batches[batch.id] = batch
        return batch

    def create_batch(
        self,
        client_id: str,
        pickup_date: date,
        lines: list[BatchLine],
        paper_batch_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Batch:
        """Create a batch at pickup. A blank paper id is generated."""
        self.get_client(client_id)

        existing_ids = [b.paper_batch_id for b in self._batches.values() if b.paper_batch_id]
        paper_id = (paper_batch_id or "").strip()
        if paper_id and paper_id in existing_ids:
            raise DuplicatePaperBatchId(paper_id)
        if not paper_id:
            paper_id = next_paper_batch_id(existing_ids)

        batch = Batch(
            id=str(uuid.uuid4()),
            client_id=client_id,
            pickup_date=pickup_date,
            lines=prepare_lines(lines, self._categories),
            status=BatchStatus.PICKUP,
            paper_batch_id=paper_id,
            notes=(notes or "").strip() or None,
        )
        self._put(batch)
        logger.info("Created batch %s (%s) total=%s", batch.id, paper_id, batch.total_amount)
        return batch

    def replace_batch_lines(
        self,
        batch_id: str,
        lines: list[BatchLine],
        notes: Optional[str] = None,
        pickup_date: Optional[date] = None,
    ) -> tuple[Batch, LineChanges]:
        batch = self.get_batch(batch_id)
        changes = replace_lines(
            batch, lines, self._categories,
            vat_rate=self.vat_rate, surcharge_rate=self.surcharge_rate,
        )
        if notes is not None:
            batch.notes = notes.strip() or None
        if pickup_date is not None:
            batch.pickup_date = pickup_date
        return batch, changes

    def update_status(
        self,
        batch_id: str,
        status: Union[BatchStatus, str],
        notes: Optional[str] = None,
    ) -> Batch:
        """Move a batch to any status. Totals are left untouched."""
        batch = self.get_batch(batch_id)
        new_status = BatchStatus(status)
        if new_status is not batch.status.next() and new_status is not batch.status:
            logger.info("Batch %s status jumps from %s to %s", batch.id, batch.status.value, new_status.value)
        batch.status = new_status
        if notes is not None:
            batch.notes = notes.strip() or None
        return batch

    # --- Catalog and client writes ---

    @staticmethod
    def _price(category_id: str, value: Numeric) -> Decimal:
        try:
            price = to_decimal(value)
        except (InvalidOperation, ValueError):
            raise InvalidCategory(f"Price for {category_id} must be a number, got {value!r}") from None
        if not price.is_finite() or price < 0:
            raise InvalidCategory(f"Price for {category_id} must be non-negative, got {value}")
        return price

    def update_category(
        self,
        category_id: str,
        price: Optional[Numeric] = None,
        name: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> LinenCategory:
        """Change a category's price, name or active flag.

        Lines already written keep the price frozen onto them; only batches
        written afterwards see the new price.
        """
        category = self.get_category(category_id)
        changes: dict[str, Any] = {}
        if price is not None:
            changes["price_per_item"] = self._price(category_id, price)
        if name is not None:
            if not name.strip():
                raise InvalidCategory(f"Name for {category_id} must not be blank")
            changes["name"] = name.strip()
        if is_active is not None:
            changes["is_active"] = bool(is_active)

        updated = replace(category, **changes)
        self._categories[category_id] = updated
        logger.info("Updated category %s: %s", category_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def bulk_update_prices(self, prices: Mapping[str, Numeric]) -> list[LinenCategory]:
        """Set several category prices at once. Nothing changes if any entry is bad."""
        checked = {}
        for category_id, value in prices.items():
            self.get_category(category_id)
            checked[category_id] = self._price(category_id, value)
        return [self.update_category(category_id, price=price) for category_id, price in checked.items()]

    def create_client(
        self,
        name: str,
        email: Optional[str] = None,
        contact_number: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Client:
        if not (name or "").strip():
            raise InvalidClient("Client name is required")
        client = Client(
            id=str(uuid.uuid4()),
            name=name.strip(),
            email=email or None,
            contact_number=contact_number or None,
            address=address or None,
        )
        self._clients[client.id] = client
        logger.info("Created client %s (%s)", client.id, client.name)
        return client

    def update_client(self, client_id: str, **fields: Any) -> Client:
        """Update name, email, contact_number, address or is_active. None leaves a field as is."""
        client = self.get_client(client_id)
        allowed = {"name", "email", "contact_number", "address", "is_active"}
        unknown = set(fields) - allowed
        if unknown:
            raise InvalidClient(f"Unknown client field(s): {', '.join(sorted(unknown))}")

        changes = {k: v for k, v in fields.items() if v is not None}
        if "name" in changes:
            if not changes["name"].strip():
                raise InvalidClient("Client name is required")
            changes["name"] = changes["name"].strip()

        updated = replace(client, **changes)
        self._clients[client_id] = updated
        if updated.name != client.name:
            for batch in self._batches.values():
                if batch.client_id == client_id:
                    batch.client_name = updated.name
        logger.info("Updated client %s: %s", client_id, ", ".join(sorted(changes)) or "no changes")
        return updated
