"""Audit export.

Writes a JSON trace of how a batch invoice was computed, line by line.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Optional

from linen_tool.engine.calculator import summarize_batch
from linen_tool.models import Batch, BatchInvoice, LinenCategory


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


def generate_audit_dict(
    batch: Batch,
    invoice: BatchInvoice,
    categories: Optional[dict[str, LinenCategory]] = None,
) -> dict:
    """Build audit dictionary for one batch invoice (no file I/O)."""
    categories = categories or {}
    summary = summarize_batch(batch, invoice)

    lines = []
    for line in invoice.lines:
        category = categories.get(line.linen_category_id)
        lines.append({
            "linen_category_id": line.linen_category_id,
            "category_name": category.name if category else None,
            "quantity_sent": line.quantity_sent,
            "quantity_received": line.quantity_received,
            "price_per_item": float(line.price_per_item),
            "express_delivery": line.express_delivery,
            "line_total": float(line.line_total),
            "discrepancy": line.discrepancy,
            "discrepancy_value": float(line.discrepancy_value),
            "surcharge": float(line.surcharge),
            "line_adjusted_total": float(line.line_adjusted_total),
            "discrepancy_details": line.discrepancy_details,
        })

    return {
        "batch_id": batch.id,
        "paper_batch_id": batch.paper_batch_id,
        "client": {"id": batch.client_id, "name": batch.client_name},
        "pickup_date": batch.pickup_date.isoformat(),
        "status": batch.status.value,
        "lines": lines,
        "totals": {
            "subtotal_received": float(invoice.subtotal_received),
            "total_discrepancy_value": float(invoice.total_discrepancy_value),
            "total_surcharge": float(invoice.total_surcharge),
            "adjusted_subtotal": float(invoice.adjusted_subtotal),
            "vat_rate": float(invoice.vat_rate),
            "vat": float(invoice.vat),
            "total": float(invoice.total),
        },
        "summary": {
            "total_items_sent": summary.total_items_sent,
            "total_items_received": summary.total_items_received,
            "discrepancy_count": summary.discrepancy_count,
            "discrepancy_percentage": float(summary.discrepancy_percentage),
            "average_item_price": float(summary.average_item_price),
            "has_discrepancy": invoice.has_discrepancy,
        },
    }


def generate_audit(
    batch: Batch,
    invoice: BatchInvoice,
    output_path: str | Path,
    categories: Optional[dict[str, LinenCategory]] = None,
) -> Path:
    """Generate audit JSON file for a batch invoice."""
    output_path = Path(output_path)
    audit = generate_audit_dict(batch, invoice, categories)
    output_path.write_text(json.dumps(audit, indent=2, cls=DecimalEncoder), encoding='utf-8')
    return output_path
