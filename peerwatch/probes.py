"""Adapters around the process-lookup and socket-listing tools."""

import logging
import os
import subprocess
from typing import Any, Callable, Dict, List, Optional, Sequence

import psutil

from .config import LSOF_COMMAND, PGREP_COMMAND
from .extractor import iter_endpoints

log = logging.getLogger(__name__)

CommandRunner = Callable[[List[str]], bytes]


class ProbeError(Exception):
    """A tool invocation failed; ``str(exc)`` is the status line to show."""


class ProcessGone(ProbeError):
    pass


def run_command(cmd: List[str]) -> bytes:
    completed = subprocess.run(cmd, check=False, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    if completed.returncode != 0 and completed.stderr:
        log.debug("%s exited %s: %s", cmd[0], completed.returncode, completed.stderr.strip())
    return completed.stdout


def find_pid(target: str, runner: CommandRunner = run_command) -> Optional[str]:
    """Return the first PID ``pgrep -f`` reports for ``target``, if any.

    Unlike taking the first line verbatim, our own PID is skipped: ``pgrep -f``
    matches full command lines and ours contains the pattern, so the first
    line could otherwise be the dashboard itself. The first remaining line wins.
    """
    try:
        output = runner(PGREP_COMMAND + [target])
    except OSError as exc:
        raise ProbeError(f"PGREP Error: {exc}") from exc
    own_pid = str(os.getpid())
    for line in output.decode("utf-8", errors="replace").splitlines():
        pid = line.strip()
        if pid and pid != own_pid:
            return pid
    return None


class LsofProbe:
    def __init__(self, runner: CommandRunner = run_command) -> None:
        self._runner = runner

    def endpoints(self, pid: str) -> List[str]:
        try:
            output = self._runner(LSOF_COMMAND + [pid])
        except OSError as exc:
            raise ProbeError(f"LSOF Error: {exc}") from exc
        return list(dict.fromkeys(iter_endpoints(output)))


class PsutilProbe:
    """Lists peers through psutil instead of lsof; no sudo for own processes."""

    def endpoints(self, pid: str) -> List[str]:
        try:
            proc = psutil.Process(int(pid))
        except ValueError as exc:
            raise ProbeError(f"PSUTIL Error: invalid pid {pid!r}") from exc
        except psutil.NoSuchProcess as exc:
            raise ProcessGone(str(exc)) from exc
        except psutil.Error as exc:
            raise ProbeError(f"PSUTIL Error: {exc}") from exc
        conns = self._process_net_connections(proc)
        endpoints: Dict[str, None] = {}
        for conn in conns:
            ip = self._extract_ip(conn.raddr)
            if ip:
                endpoints.setdefault(ip)
        return list(endpoints)

    @staticmethod
    def _process_net_connections(proc: psutil.Process) -> List[Any]:
        getter = getattr(proc, "net_connections", None)
        try:
            if getter:
                return getter(kind="inet")
            return proc.connections(kind="inet")
        except psutil.NoSuchProcess as exc:
            raise ProcessGone(str(exc)) from exc
        except psutil.Error as exc:
            raise ProbeError(f"PSUTIL Error: {exc}") from exc

    @staticmethod
    def _extract_ip(addr: Optional[Sequence[Any]]) -> Optional[str]:
        if not addr:
            return None
        return getattr(addr, "ip", None) or addr[0]
