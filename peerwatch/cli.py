import argparse
import curses
import logging
import math
import queue
import sys
from typing import List, Optional

from . import __version__
from .config import LOG_FILE, LOG_LEVELS, POLL_INTERVAL, SOURCES, Settings
from .messages import Message
from .model import ViewModel
from .poller import Poller
from .probes import LsofProbe, PsutilProbe
from .ui import Presenter

log = logging.getLogger(__name__)


def interval_seconds(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval: {text!r}") from None
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"interval must be a finite number of seconds, got {text!r}")
    return value


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="peerwatch",
        description="Watch which remote peers a running process talks to",
    )
    parser.add_argument("target", help="Process name pattern, passed verbatim to 'pgrep -f'")
    parser.add_argument("--interval", type=interval_seconds, default=POLL_INTERVAL, help="Poll interval in seconds (default: 1.0)")
    parser.add_argument(
        "--source",
        default="lsof",
        choices=SOURCES,
        help="Socket listing backend: 'sudo lsof' (default) or psutil",
    )
    parser.add_argument("--log-file", default=LOG_FILE, help=f"Diagnostics log (default: {LOG_FILE})")
    parser.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS, help="Diagnostics log level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def configure_logging(settings: Settings) -> bool:
    """Send diagnostics to the log file; returns False if it could not be opened."""
    handler: logging.Handler
    try:
        handler = logging.FileHandler(settings.log_file)
    except OSError as exc:
        print(f"peerwatch: logging disabled, cannot open {settings.log_file}: {exc}", file=sys.stderr)
        handler = logging.NullHandler()
    logging.basicConfig(
        handlers=[handler],
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    return not isinstance(handler, logging.NullHandler)


def build_poller(settings: Settings, outbox: "queue.Queue[Message]") -> Poller:
    probe = PsutilProbe() if settings.source == "psutil" else LsofProbe()
    return Poller(settings.target, outbox, probe=probe, interval=settings.interval)


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_args(parse_args(argv))
    configure_logging(settings)

    channel: "queue.Queue[Message]" = queue.Queue()
    model = ViewModel(settings.target)
    presenter = Presenter(model, channel)
    build_poller(settings, channel).start()

    try:
        curses.wrapper(presenter.run)
    except curses.error as exc:
        log.error("terminal setup failed: %s", exc)
        print(f"App Error: {exc}")
        return 1
    return 0


def run() -> None:
    sys.exit(main())
