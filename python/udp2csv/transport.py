"""Datagram transport for the capture pipeline."""

from __future__ import annotations

import ipaddress
import socket
from typing import Protocol

from .config import RECV_BUFFER_SIZE


class Transport(Protocol):
    """Abstract datagram source."""

    def read(self, n: int = RECV_BUFFER_SIZE) -> bytes: ...
    def close(self) -> None: ...


class BindError(OSError):
    """The requested local address/port could not be acquired."""

    def __init__(self, host: str, port: int, cause: OSError):
        super().__init__(cause.errno, f"Could not bind to provided address {host}:{port}; {cause}")
        self.host = host
        self.port = port
        self.cause = cause


class UDPTransport:
    """UDP datagram receiver bound to one local address.

    Reads block until a datagram arrives; there is no receive timeout.
    """

    def __init__(self, host: str = "0.0.0.0", port: int = 4200):
        self.host = host
        self.port = port
        family = socket.AF_INET
        try:
            if ipaddress.ip_address(host).version == 6:
                family = socket.AF_INET6
        except ValueError:
            pass  # hostname, let bind() resolve it
        try:
            self._sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as exc:
            # e.g. an IPv6 address on a host with IPv6 disabled
            raise BindError(host, port, exc) from exc
        try:
            self._sock.bind((host, port))
        except OSError as exc:
            self._sock.close()
            raise BindError(host, port, exc) from exc
        self._sock.settimeout(None)

    @property
    def address(self) -> tuple:
        """Actual bound address (useful when port 0 was requested)."""
        return self._sock.getsockname()

    def read(self, n: int = RECV_BUFFER_SIZE) -> bytes:
        return self._sock.recv(n)

    def close(self) -> None:
        try:
            # Wakes a thread blocked in recv(); close() alone may not
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
