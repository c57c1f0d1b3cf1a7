"""Process-wide capture configuration."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from .elements import ElementType

# Datagrams longer than this are truncated by the socket
RECV_BUFFER_SIZE = 512

# Packets accumulated before a file flush
FLUSH_THRESHOLD = 1000


@dataclass(frozen=True)
class CaptureConfig:
    bind: str
    port: int
    element_type: ElementType = ElementType.U16
    output: Path | None = None
    flush_threshold: int = FLUSH_THRESHOLD
    buffer_size: int = RECV_BUFFER_SIZE

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")
        if self.flush_threshold < 1:
            raise ValueError(f"flush threshold must be positive: {self.flush_threshold}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> CaptureConfig:
        return cls(
            bind=str(args.bind),
            port=args.port,
            element_type=args.data_type,
            output=Path(args.output) if args.output else None,
            flush_threshold=args.flush_threshold,
        )
