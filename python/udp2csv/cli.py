"""udp2csv command-line tool."""

from __future__ import annotations

import argparse
import ipaddress
import logging
import sys

from . import __version__
from .config import FLUSH_THRESHOLD, CaptureConfig
from .elements import ELEMENT_NAMES, ElementType
from .interfaces import print_local_interfaces
from .pipeline import Pipeline
from .receiver import ReceiveLoop
from .sink import open_sink
from .transport import BindError, UDPTransport

logger = logging.getLogger(__name__)


def _element_type(value: str) -> ElementType:
    try:
        return ElementType.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"{exc} (choose from {', '.join(ELEMENT_NAMES)})") from None


def _port(value: str) -> int:
    port = int(value)
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def _positive(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be positive: {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="udp2csv",
        description="Capture UDP datagrams and write their payload values as CSV",
    )
    parser.add_argument("-b", "--bind", required=True, type=ipaddress.ip_address,
                        help="Address of local interface")
    parser.add_argument("-p", "--port", required=True, type=_port,
                        help="Local port")
    parser.add_argument("-d", "--data-type", type=_element_type, default=ElementType.U16,
                        metavar="TYPE",
                        help=f"Data type of values: {', '.join(ELEMENT_NAMES)} (default: u16)")
    parser.add_argument("-o", "--output",
                        help="CSV file to append to; print to stdout if not given")
    parser.add_argument("--flush-threshold", type=_positive, default=FLUSH_THRESHOLD,
                        metavar="N",
                        help=f"Packets per line written to the output file (default: {FLUSH_THRESHOLD})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(config: CaptureConfig) -> int:
    """Bind, then capture until interrupted.  Returns a process exit status."""
    try:
        transport = UDPTransport(config.bind, config.port)
    except BindError as exc:
        logger.error("%s", exc.strerror)
        print_local_interfaces()
        return 1

    logger.info("listening on %s:%d, decoding as %s", config.bind, config.port,
                config.element_type)

    pipeline = Pipeline(config, open_sink(config))
    loop = ReceiveLoop(transport, pipeline.submit, config.buffer_size)
    pipeline.start()
    try:
        loop.run()
    except KeyboardInterrupt:
        pass
    finally:
        loop.stop()
        pipeline.close()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(run(CaptureConfig.from_args(args)))


if __name__ == "__main__":
    main()
