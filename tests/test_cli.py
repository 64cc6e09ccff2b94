"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from linen_tool.__main__ import app

SAMPLE_DATA = Path(__file__).parent.parent / "data" / "sample_data.json"

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("LINEN_DATA_FILE", raising=False)
    monkeypatch.delenv("LINEN_VAT_RATE", raising=False)


class TestInvoiceCommand:
    def test_invoice(self):
        result = runner.invoke(app, ["invoice", "b-1001", "--data", str(SAMPLE_DATA)])
        assert result.exit_code == 0, result.output
        assert "Batch RSL0001 - Harbour Hotel" in result.output
        assert "Bed Sheet: 8 (-2) x 2.50 = 20.00 -> 15.00" in result.output
        assert "Discrepancy Adjustment: -5.00" in result.output
        assert "TOTAL: 103.50" in result.output

    def test_vat_override(self):
        result = runner.invoke(app, ["invoice", "b-1002", "--data", str(SAMPLE_DATA), "--vat-rate", "0.2"])
        assert result.exit_code == 0, result.output
        assert "TOTAL: 240.00" in result.output

    def test_data_file_from_env(self, monkeypatch):
        monkeypatch.setenv("LINEN_DATA_FILE", str(SAMPLE_DATA))
        result = runner.invoke(app, ["invoice", "b-1002"])
        assert result.exit_code == 0, result.output
        assert "TOTAL: 230.00" in result.output

    def test_audit_out(self, tmp_path):
        out = tmp_path / "audit.json"
        result = runner.invoke(app, ["invoice", "b-1001", "--data", str(SAMPLE_DATA), "--audit-out", str(out)])
        assert result.exit_code == 0, result.output
        audit = json.loads(out.read_text(encoding="utf-8"))
        assert audit["paper_batch_id"] == "RSL0001"
        assert audit["totals"]["total"] == 103.5

    def test_unknown_batch(self):
        result = runner.invoke(app, ["invoice", "nope", "--data", str(SAMPLE_DATA)])
        assert result.exit_code == 1
        assert "Batch nope not found" in result.output

    def test_missing_data_file(self):
        result = runner.invoke(app, ["invoice", "b-1001"])
        assert result.exit_code == 1

    def test_unreadable_data_file(self, tmp_path):
        result = runner.invoke(app, ["invoice", "b-1001", "--data", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "FATAL ERROR" in result.output

    def test_non_numeric_price_in_seed(self, tmp_path):
        seed = json.loads(SAMPLE_DATA.read_text(encoding="utf-8"))
        seed["categories"][0]["price_per_item"] = "abc"
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(seed), encoding="utf-8")

        result = runner.invoke(app, ["report", "--data", str(path), "--month", "2025-01"])
        assert result.exit_code == 1
        assert "FATAL ERROR" in result.output


class TestReportCommand:
    def test_month(self):
        result = runner.invoke(app, ["report", "--data", str(SAMPLE_DATA), "--month", "2025-01"])
        assert result.exit_code == 0, result.output
        assert "Invoice summary 2025-01 (2025-01-01 to 2025-01-31)" in result.output
        assert "Harbour Hotel: 2 batch(es), 41 items, 121.20 [2 with discrepancy]" in result.output
        assert "TOTAL: 321.20" in result.output

    def test_year_single_client(self):
        result = runner.invoke(app, ["report", "--data", str(SAMPLE_DATA), "--year", "2024", "--client-id", "clinic"])
        assert result.exit_code == 0, result.output
        assert "Northside Clinic: 1 batch(es), 12 items, 30.00" in result.output

    def test_empty_period(self):
        result = runner.invoke(app, ["report", "--data", str(SAMPLE_DATA), "--month", "2025-06"])
        assert result.exit_code == 0, result.output
        assert "No batches in period." in result.output

    def test_period_required(self):
        result = runner.invoke(app, ["report", "--data", str(SAMPLE_DATA)])
        assert result.exit_code == 1

    def test_bad_month(self):
        result = runner.invoke(app, ["report", "--data", str(SAMPLE_DATA), "--month", "Jan 2025"])
        assert result.exit_code == 1
        assert "YYYY-MM" in result.output


class TestStatsCommand:
    def test_stats(self):
        result = runner.invoke(app, ["stats", "--data", str(SAMPLE_DATA), "--month", "2025-01"])
        assert result.exit_code == 0, result.output
        assert "Batches:      3 (+200.00% vs previous month)" in result.output
        assert "Revenue:      321.20 (+970.67%)" in result.output
        assert "Pillow Case: 28" in result.output
