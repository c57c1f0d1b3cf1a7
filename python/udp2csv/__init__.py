"""udp2csv - UDP telemetry capture and CSV decoder."""

__version__ = "0.1.0"

from .elements import ElementType
from .decoder import DecodeError, decode_packet, iter_values
from .formatter import format_values
from .sink import CsvSink, ConsoleSink, FileSink, open_sink
from .transport import BindError, UDPTransport
from .receiver import ReceiveLoop
from .pipeline import Pipeline
from .config import CaptureConfig

__all__ = [
    "ElementType",
    "DecodeError", "decode_packet", "iter_values",
    "format_values",
    "CsvSink", "ConsoleSink", "FileSink", "open_sink",
    "BindError", "UDPTransport",
    "ReceiveLoop", "Pipeline", "CaptureConfig",
]
