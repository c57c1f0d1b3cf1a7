"""Element type definitions for packet payloads."""

from __future__ import annotations

from enum import IntEnum

import numpy as np


class ElementType(IntEnum):
    BOOL = 0
    U8 = 1
    I8 = 2
    U16 = 3
    I16 = 4

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def width(self) -> int:
        """Bytes consumed per decoded element."""
        return _TYPE_WIDTH[self]

    @property
    def dtype(self) -> np.dtype:
        """numpy dtype of one raw element (network byte order)."""
        return _TYPE_DTYPE[self]

    @classmethod
    def parse(cls, name: str) -> ElementType:
        """Look up an element type by name, case-insensitively."""
        try:
            return _ALIASES[name.strip().lower()]
        except KeyError:
            raise ValueError(f"invalid datatype: {name!r}") from None


_TYPE_WIDTH = {
    ElementType.BOOL: 1,
    ElementType.U8: 1,
    ElementType.I8: 1,
    ElementType.U16: 2,
    ElementType.I16: 2,
}

# Booleans are read as whole bytes and expanded to bits afterwards
_TYPE_DTYPE = {
    ElementType.BOOL: np.dtype("u1"),
    ElementType.U8: np.dtype("u1"),
    ElementType.I8: np.dtype("i1"),
    ElementType.U16: np.dtype(">u2"),
    ElementType.I16: np.dtype(">i2"),
}

_ALIASES = {str(t): t for t in ElementType}
_ALIASES["boolean"] = ElementType.BOOL

ELEMENT_NAMES = sorted(_ALIASES)
