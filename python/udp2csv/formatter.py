"""CSV rendering of decoded packet values."""

from __future__ import annotations

from typing import Iterable

DELIMITER = ","


def format_values(values: Iterable[int]) -> str:
    """Render one packet's values as ``v0,v1,...`` with no trailing comma."""
    return DELIMITER.join(str(v) for v in values)
