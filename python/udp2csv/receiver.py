"""Network receive loop (pipeline producer)."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .config import RECV_BUFFER_SIZE
from .transport import Transport

logger = logging.getLogger(__name__)


class ReceiveLoop:
    """Blocks on a transport and hands every datagram to *submit*.

    *submit* must not block; the loop never waits for a datagram to be
    processed.  Receive errors are logged and the loop keeps going until
    stop() is called.
    """

    def __init__(self, transport: Transport, submit: Callable[[bytes], None],
                 buffer_size: int = RECV_BUFFER_SIZE):
        self._transport = transport
        self._submit = submit
        self._buffer_size = buffer_size
        self._stop = threading.Event()
        self.received = 0

    def run(self) -> None:
        while not self._stop.is_set():
            try:
                data = self._transport.read(self._buffer_size)
            except OSError as exc:
                if self._stop.is_set():
                    break
                logger.error("Error receiving message: %s", exc)
                continue
            if self._stop.is_set():
                break
            self.received += 1
            self._submit(bytes(data))
        logger.debug("receive loop stopped after %d datagrams", self.received)

    def stop(self) -> None:
        """Stop the loop.  Closing the transport unblocks a pending read."""
        self._stop.set()
        try:
            self._transport.close()
        except OSError:
            pass
