import json
from pathlib import Path

import pytest

from linen_tool.store import BatchStore

SAMPLE_DATA = Path(__file__).parent.parent / "data" / "sample_data.json"


@pytest.fixture
def seed_data():
    """Return the sample seed as a fresh dict."""
    return json.loads(SAMPLE_DATA.read_text(encoding="utf-8"))


@pytest.fixture
def store(seed_data):
    """Return a store loaded from the sample seed."""
    return BatchStore.from_dict(seed_data)
