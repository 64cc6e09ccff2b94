"""Tests for paper batch id generation."""

from linen_tool.batch_ids import next_paper_batch_id


class TestNextPaperBatchId:
    def test_first_id(self):
        assert next_paper_batch_id([]) == "RSL0001"

    def test_follows_highest(self):
        assert next_paper_batch_id(["RSL0003", "RSL0010", "RSL0002"]) == "RSL0011"

    def test_ignores_ids_without_number(self):
        assert next_paper_batch_id(["MANUAL", "", "RSL0004"]) == "RSL0005"

    def test_widens_past_padding(self):
        assert next_paper_batch_id(["RSL9999"]) == "RSL10000"

    def test_custom_prefix(self):
        assert next_paper_batch_id(["X01"], prefix="X", width=2) == "X02"
