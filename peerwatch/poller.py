"""Background discovery loop: pgrep, list sockets, diff, post to the presenter."""

import logging
import queue
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence, Set

from .config import POLL_INTERVAL
from .extractor import sort_endpoints
from .messages import DataUpdate, Message, PollError
from .probes import CommandRunner, LsofProbe, ProbeError, ProcessGone, find_pid, run_command

log = logging.getLogger(__name__)


class SocketProbe(Protocol):
    def endpoints(self, pid: str) -> Sequence[str]: ...


def format_history_entry(endpoint: str, when: datetime) -> str:
    return f"[{when.strftime('%H:%M:%S')}] {endpoint}"


class Poller:
    def __init__(
        self,
        target: str,
        outbox: "queue.Queue[Message]",
        *,
        probe: Optional[SocketProbe] = None,
        runner: CommandRunner = run_command,
        clock: Callable[[], datetime] = datetime.now,
        interval: float = POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.target = target
        self.outbox = outbox
        self.probe: SocketProbe = probe if probe is not None else LsofProbe(runner)
        self.interval = interval
        self._runner = runner
        self._clock = clock
        self._sleep = sleep
        self._monotonic = monotonic
        # first-contact memory; never pruned
        self._announced: Set[str] = set()

    def poll_once(self) -> Message:
        message = self._collect()
        self.outbox.put(message)
        return message

    def _collect(self) -> Message:
        waiting = f"Waiting for process '{self.target}'..."
        try:
            pid = find_pid(self.target, self._runner)
            if pid is None:
                return PollError(waiting)
            active = self.probe.endpoints(pid)
        except ProcessGone:
            return PollError(waiting)
        except ProbeError as exc:
            log.warning("%s", exc)
            return PollError(str(exc))

        new_entries: List[str] = []
        for endpoint in active:
            if endpoint in self._announced:
                continue
            self._announced.add(endpoint)
            new_entries.append(format_history_entry(endpoint, self._clock()))
            log.debug("first contact from pid %s: %s", pid, endpoint)
        sorted_connections = sort_endpoints(set(active))
        return DataUpdate(
            active=sorted_connections,
            new_history_entries=new_entries,
            pid_msg=f"Monitoring PID: {pid}",
        )

    def run(self) -> None:
        log.info("poller started for %r every %.2fs", self.target, self.interval)
        while True:
            started = self._monotonic()
            try:
                self.poll_once()
            except Exception as exc:
                log.exception("poll iteration failed")
                self.outbox.put(PollError(f"Poll Error: {exc}"))
            elapsed = self._monotonic() - started
            if elapsed < self.interval:
                self._sleep(self.interval - elapsed)

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name="peerwatch-poller", daemon=True)
        thread.start()
        return thread
