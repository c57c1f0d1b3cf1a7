"""Batched CSV output: console write-through or append-only file.

ConsoleSink writes every packet's text to a stream as soon as it arrives.
FileSink accumulates text and appends it to a file as one line every
``threshold`` packets, plus once more on close.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

from .config import FLUSH_THRESHOLD, CaptureConfig

logger = logging.getLogger(__name__)


class CsvSink(ABC):
    """Owns the accumulating text buffer and decides when to flush it."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._closed = False

    @property
    def pending(self) -> str:
        """Text accumulated since the last flush."""
        return "".join(self._parts)

    def write_packet(self, text: str) -> None:
        """Append one packet's rendering.  Packets are not separated."""
        self._parts.append(text)
        self._packet_done()

    @abstractmethod
    def _packet_done(self) -> None: ...

    @abstractmethod
    def flush(self) -> None:
        """Emit the pending text and clear the buffer."""

    def close(self) -> None:
        """Final flush.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.flush()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ConsoleSink(CsvSink):
    """Write-through to a text stream, one write per packet."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream if stream is not None else sys.stdout

    def _packet_done(self) -> None:
        self.flush()

    def flush(self) -> None:
        text = self.pending
        self._parts.clear()
        if not text:
            return
        self._stream.write(text)
        self._stream.flush()


class FileSink(CsvSink):
    """Append-only file output, one line per batch of packets."""

    def __init__(self, path: str | Path, threshold: int = FLUSH_THRESHOLD) -> None:
        super().__init__()
        self.path = Path(path)
        self.threshold = threshold
        self.count = 0
        self.flushes = 0

    def _packet_done(self) -> None:
        self.count += 1
        if self.count >= self.threshold:
            self.flush()

    def flush(self) -> None:
        if self.count == 0:
            return
        text = self.pending
        self._parts.clear()
        self.count = 0
        self.flushes += 1
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(text + "\n")
        except OSError as exc:
            logger.error("Couldn't write to file %s: %s", self.path, exc)


def open_sink(config: CaptureConfig, stream: TextIO | None = None) -> CsvSink:
    """Pick the output policy for *config*: file if a path is set, else console."""
    if config.output is not None:
        return FileSink(config.output, threshold=config.flush_threshold)
    return ConsoleSink(stream)
