"""Paper batch id generation.

Paper ids are printed on the pickup slip: a prefix followed by a
zero-padded running number (``RSL0001``, ``RSL0002``...).
"""

from __future__ import annotations

import re
from collections.abc import Iterable

PAPER_ID_PREFIX = "RSL"
PAPER_ID_WIDTH = 4

_SUFFIX_RE = re.compile(r"(\d+)$")


def next_paper_batch_id(
    existing_ids: Iterable[str],
    prefix: str = PAPER_ID_PREFIX,
    width: int = PAPER_ID_WIDTH,
) -> str:
    """Next id after the highest numeric suffix found in ``existing_ids``."""
    highest = 0
    for paper_id in existing_ids:
        match = _SUFFIX_RE.search(paper_id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{str(highest + 1).zfill(width)}"
