import argparse
import os
import tempfile
from dataclasses import dataclass

POLL_INTERVAL = 1.0
REFRESH_MIN_INTERVAL = 0.2
INPUT_TIMEOUT_MS = 16
SEEN_IPS_WINDOW = 1000
PAGE_STEP = 10
LOG_FILE = os.path.join(tempfile.gettempdir(), f"peerwatch-{os.getuid()}.log")
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
SOURCES = ["lsof", "psutil"]
PGREP_COMMAND = ["pgrep", "-f"]
LSOF_COMMAND = ["sudo", "lsof", "-i", "-P", "-n", "-p"]
INITIAL_STATUS = "Initializing..."


@dataclass
class Settings:
    target: str
    interval: float = POLL_INTERVAL
    source: str = "lsof"
    log_file: str = LOG_FILE
    log_level: str = "WARNING"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Settings":
        return cls(
            target=args.target,
            interval=max(args.interval, REFRESH_MIN_INTERVAL),
            source=args.source,
            log_file=args.log_file,
            log_level=args.log_level,
        )
