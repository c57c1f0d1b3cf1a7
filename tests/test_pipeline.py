"""Test the receive loop, UDP transport and producer/consumer pipeline.

Uses real loopback sockets on free ports.  Run from the repo root:
    python3 tests/test_pipeline.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import socket
import struct
import tempfile
import threading
import time
from pathlib import Path

import udp2csv.transport as transport_mod
from udp2csv.cli import run
from udp2csv.config import CaptureConfig
from udp2csv.elements import ElementType
from udp2csv.pipeline import Pipeline
from udp2csv.receiver import ReceiveLoop
from udp2csv.sink import ConsoleSink, FileSink
from udp2csv.transport import BindError, UDPTransport

TIMEOUT = 5.0


class RecordingStream:
    def __init__(self):
        self.writes: list[str] = []

    def write(self, text: str) -> int:
        self.writes.append(text)
        return len(text)

    def flush(self) -> None:
        pass


class ScriptedTransport:
    """Returns scripted datagrams or raises scripted errors, then stops the loop."""

    def __init__(self, items):
        self.items = list(items)
        self.loop = None
        self.closed = False

    def read(self, n=512):
        if not self.items:
            self.loop.stop()
            return b""
        item = self.items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item[:n]

    def close(self):
        self.closed = True


def wait_for(condition, timeout=TIMEOUT):
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        time.sleep(0.01)


def send(port, *datagrams):
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sender:
        for d in datagrams:
            sender.sendto(d, ("127.0.0.1", port))


def test_process_u16_packet():
    """U16 datagram 0x0001 0x0002 -> "1,2" appended to the buffer."""
    print("test_process_u16_packet...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        config = CaptureConfig("127.0.0.1", 0, ElementType.U16, output=Path(tmp) / "out.csv")
        sink = FileSink(config.output)
        pipeline = Pipeline(config, sink)

        text = pipeline.process(struct.pack(">HH", 1, 2))
        assert text == "1,2"
        assert sink.pending == "1,2"
        assert sink.count == 1

    print(" OK")


def test_consumer_thread_preserves_order_and_flushes_on_close():
    print("test_consumer_thread_preserves_order_and_flushes_on_close...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "out.csv"
        config = CaptureConfig("127.0.0.1", 0, ElementType.U8, output=path)
        pipeline = Pipeline(config, FileSink(path))
        pipeline.start()

        pipeline.submit(bytes([1, 2]))
        pipeline.submit(bytes([3]))
        pipeline.submit(bytes([4, 5]))
        pipeline.close(timeout=TIMEOUT)

        assert pipeline.processed == 3
        assert path.read_text(encoding="utf-8") == "1,234,5\n"

        # second close is a no-op
        pipeline.close(timeout=TIMEOUT)
        assert path.read_text(encoding="utf-8") == "1,234,5\n"

    print(" OK")


def test_close_without_start_drains_queue():
    print("test_close_without_start_drains_queue...", end="")

    stream = RecordingStream()
    config = CaptureConfig("127.0.0.1", 0, ElementType.I8)
    pipeline = Pipeline(config, ConsoleSink(stream))
    pipeline.submit(b"\xff")
    pipeline.submit(b"\x80")
    pipeline.close()

    assert stream.writes == ["-1", "-128"]

    print(" OK")


def test_receive_errors_do_not_stop_loop():
    print("test_receive_errors_do_not_stop_loop...", end="")

    received = []
    transport = ScriptedTransport([b"\x01", OSError("boom"), b"\x02"])
    loop = ReceiveLoop(transport, received.append)
    transport.loop = loop

    loop.run()

    assert received == [b"\x01", b"\x02"]
    assert loop.received == 2
    assert transport.closed

    print(" OK")


def test_receive_loop_truncates_to_buffer_size():
    print("test_receive_loop_truncates_to_buffer_size...", end="")

    received = []
    transport = ScriptedTransport([bytes(600)])
    loop = ReceiveLoop(transport, received.append)
    transport.loop = loop
    loop.run()

    assert len(received) == 1
    assert len(received[0]) == 512
    assert isinstance(received[0], bytes)

    print(" OK")


def test_bind_failure():
    print("test_bind_failure...", end="")

    with UDPTransport("127.0.0.1", 0) as first:
        port = first.address[1]
        try:
            UDPTransport("127.0.0.1", port)
        except BindError as exc:
            assert exc.host == "127.0.0.1"
            assert exc.port == port
            assert f"127.0.0.1:{port}" in str(exc)
            assert isinstance(exc.cause, OSError)
        else:
            raise AssertionError("expected BindError")

    print(" OK")


def test_socket_creation_failure_is_bind_error():
    """An unsupported address family (IPv6 disabled) reports as BindError."""
    print("test_socket_creation_failure_is_bind_error...", end="")

    class NoIPv6Socket:
        AF_INET = socket.AF_INET
        AF_INET6 = socket.AF_INET6
        SOCK_DGRAM = socket.SOCK_DGRAM
        SHUT_RDWR = socket.SHUT_RDWR

        @staticmethod
        def socket(family, kind):
            if family == socket.AF_INET6:
                raise OSError(97, "Address family not supported by protocol")
            return socket.socket(family, kind)

    original = transport_mod.socket
    transport_mod.socket = NoIPv6Socket
    try:
        try:
            UDPTransport("::1", 4200)
        except BindError as exc:
            assert exc.host == "::1"
            assert exc.port == 4200
            assert "::1:4200" in str(exc)
            assert exc.cause.errno == 97
        else:
            raise AssertionError("expected BindError")

        # reported and exits 1 rather than escaping as a traceback
        assert run(CaptureConfig("::1", 4200)) == 1
    finally:
        transport_mod.socket = original

    print(" OK")


def test_loopback_end_to_end():
    """Datagrams sent over loopback arrive on the console sink in order."""
    print("test_loopback_end_to_end...", end="")

    stream = RecordingStream()
    transport = UDPTransport("127.0.0.1", 0)
    port = transport.address[1]
    config = CaptureConfig("127.0.0.1", port, ElementType.U8)
    pipeline = Pipeline(config, ConsoleSink(stream))
    loop = ReceiveLoop(transport, pipeline.submit, config.buffer_size)

    pipeline.start()
    t = threading.Thread(target=loop.run, daemon=True)
    t.start()

    try:
        send(port, bytes([10]), bytes([20]), bytes(600))
        wait_for(lambda: len(stream.writes) == 3)
    finally:
        loop.stop()
        t.join(TIMEOUT)
        pipeline.close(timeout=TIMEOUT)

    assert not t.is_alive()
    assert stream.writes[0] == "10"
    assert stream.writes[1] == "20"
    # oversized datagram truncated to the 512-byte receive buffer
    assert stream.writes[2] == ",".join(["0"] * 512)

    print(" OK")


def test_loopback_file_output():
    print("test_loopback_file_output...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "capture.csv"
        transport = UDPTransport("127.0.0.1", 0)
        port = transport.address[1]
        config = CaptureConfig("127.0.0.1", port, ElementType.BOOL, output=path,
                               flush_threshold=2)
        pipeline = Pipeline(config, FileSink(path, config.flush_threshold))
        loop = ReceiveLoop(transport, pipeline.submit)

        pipeline.start()
        t = threading.Thread(target=loop.run, daemon=True)
        t.start()

        try:
            send(port, bytes([0b00000101]), bytes([0xff]), bytes([0x00]))
            wait_for(lambda: pipeline.processed == 3)
        finally:
            loop.stop()
            t.join(TIMEOUT)
            pipeline.close(timeout=TIMEOUT)

        assert path.read_text(encoding="utf-8").splitlines() == [
            "1,0,1,0,0,0,0,0" + "1,1,1,1,1,1,1,1",
            "0,0,0,0,0,0,0,0",
        ]

    print(" OK")


if __name__ == "__main__":
    print("udp2csv pipeline tests")
    print("======================\n")

    test_process_u16_packet()
    test_consumer_thread_preserves_order_and_flushes_on_close()
    test_close_without_start_drains_queue()
    test_receive_errors_do_not_stop_loop()
    test_receive_loop_truncates_to_buffer_size()
    test_bind_failure()
    test_socket_creation_failure_is_bind_error()
    test_loopback_end_to_end()
    test_loopback_file_output()

    print("\nAll pipeline tests passed.")
