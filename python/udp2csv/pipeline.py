"""Producer/consumer coordinator: queue -> decode -> format -> sink."""

from __future__ import annotations

import logging
import queue
import threading

from .config import CaptureConfig
from .decoder import decode_packet
from .formatter import format_values
from .sink import CsvSink

logger = logging.getLogger(__name__)

# End-of-stream marker queued by close()
_CLOSED = object()


class Pipeline:
    """Single consumer thread fed by an unbounded FIFO of packets.

    submit() never blocks, so the receive loop is never held up by
    decoding or output.  close() marks the producer as gone; the consumer
    drains what is already queued, flushes the sink one last time and exits.
    """

    def __init__(self, config: CaptureConfig, sink: CsvSink):
        self.config = config
        self.sink = sink
        self.processed = 0
        self._queue: queue.Queue = queue.Queue()
        self._thread: threading.Thread | None = None
        self._closed = False

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self._consume,
            name="udp2csv-writer",
            daemon=True,
        )
        self._thread.start()

    def submit(self, packet: bytes) -> None:
        self._queue.put_nowait(packet)

    def close(self, timeout: float | None = None) -> None:
        """Signal end of input and wait for the final flush."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._thread:
            self._thread.join(timeout)
        else:
            # never started: drain synchronously so nothing queued is lost
            self._consume()

    def process(self, packet: bytes) -> str:
        """Decode, format and hand one packet to the sink."""
        values = decode_packet(packet, self.config.element_type)
        text = format_values(values)
        self.sink.write_packet(text)
        self.processed += 1
        return text

    def _consume(self) -> None:
        while True:
            packet = self._queue.get()
            if packet is _CLOSED:
                break
            try:
                self.process(packet)
            except Exception:
                logger.exception("failed to process %d-byte packet", len(packet))

        self.sink.close()
        logger.info("recv thread disconnected after %d packets", self.processed)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.close()
