"""Payload decoder: raw datagram bytes -> sequence of integers."""

from __future__ import annotations

import logging
from typing import Iterator

import numpy as np

from .elements import ElementType

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """A payload could not be interpreted as the configured element type."""


def iter_values(data: bytes, element_type: ElementType) -> Iterator[int]:
    """Lazily decode *data* as a homogeneous run of *element_type* values.

    Values are yielded in buffer order.  Multi-byte types are big-endian.
    BOOL expands every byte into eight 0/1 values, bit 0 first.

    Bytes at the end of the buffer that do not fill a whole element are
    dropped without error.
    """
    width = element_type.width
    usable = len(data) - len(data) % width
    if usable == 0:
        return

    try:
        raw = np.frombuffer(data, dtype=element_type.dtype, count=usable // width)
        if element_type == ElementType.BOOL:
            raw = np.unpackbits(raw, bitorder="little")
    except (ValueError, TypeError) as exc:
        raise DecodeError(f"cannot decode {len(data)} bytes as {element_type}: {exc}") from exc

    yield from raw.tolist()


def decode_packet(data: bytes, element_type: ElementType) -> list[int]:
    """Decode a whole packet, keeping whatever decoded before a failure."""
    values: list[int] = []
    try:
        for value in iter_values(data, element_type):
            values.append(value)
    except DecodeError as exc:
        logger.error("error while parsing: %s", exc)
    return values
