import os
from collections import namedtuple
from types import SimpleNamespace

import psutil
import pytest

from peerwatch import probes
from peerwatch.probes import LsofProbe, ProbeError, ProcessGone, PsutilProbe, find_pid, run_command

from .helpers import ScriptedRunner, lsof_output

addr = namedtuple("addr", "ip port")


def test_find_pid_strips_and_skips_blank_lines():
    assert find_pid("x", ScriptedRunner(pgrep=[b"\n\n  314 \n"])) == "314"


def test_find_pid_none_when_nothing_matches():
    assert find_pid("x", ScriptedRunner(pgrep=[b""])) is None


def test_find_pid_skips_our_own_process():
    own = str(os.getpid()).encode()
    assert find_pid("x", ScriptedRunner(pgrep=[own + b"\n"])) is None
    assert find_pid("x", ScriptedRunner(pgrep=[own + b"\n808\n909\n"])) == "808"


def test_find_pid_wraps_spawn_errors():
    with pytest.raises(ProbeError, match="^PGREP Error: "):
        find_pid("x", ScriptedRunner(pgrep=[OSError("exec failed")]))


def test_lsof_probe_dedups_in_listing_order():
    runner = ScriptedRunner(pgrep=[b""], lsof=[lsof_output("8.8.8.8", "1.1.1.1", "8.8.8.8")])
    assert LsofProbe(runner).endpoints("9") == ["8.8.8.8", "1.1.1.1"]


def test_lsof_probe_wraps_spawn_errors():
    runner = ScriptedRunner(pgrep=[b""], lsof=[FileNotFoundError(2, "No such file or directory", "sudo")])
    with pytest.raises(ProbeError, match="^LSOF Error: "):
        LsofProbe(runner).endpoints("9")


def test_run_command_returns_stdout_even_on_failure(monkeypatch):
    completed = SimpleNamespace(returncode=1, stdout=b"partial", stderr=b"sudo: a password is required")
    monkeypatch.setattr(probes.subprocess, "run", lambda *args, **kwargs: completed)
    assert run_command(["sudo", "lsof"]) == b"partial"


class FakeProcess:
    connections_result = []
    error = None

    def __init__(self, pid):
        self.pid = pid

    def net_connections(self, kind="inet"):
        assert kind == "inet"
        if self.error is not None:
            raise self.error
        return self.connections_result


def test_psutil_probe_lists_remote_ips(monkeypatch):
    FakeProcess.error = None
    FakeProcess.connections_result = [
        SimpleNamespace(raddr=addr("93.184.216.34", 443)),
        SimpleNamespace(raddr=()),
        SimpleNamespace(raddr=addr("2001:db8::1", 443)),
        SimpleNamespace(raddr=addr("93.184.216.34", 80)),
    ]
    monkeypatch.setattr(probes.psutil, "Process", FakeProcess)
    assert PsutilProbe().endpoints("12") == ["93.184.216.34", "2001:db8::1"]


def test_psutil_probe_missing_process(monkeypatch):
    def vanished(pid):
        raise psutil.NoSuchProcess(pid)

    monkeypatch.setattr(probes.psutil, "Process", vanished)
    with pytest.raises(ProcessGone):
        PsutilProbe().endpoints("12")


def test_psutil_probe_access_denied(monkeypatch):
    FakeProcess.error = psutil.AccessDenied(12)
    monkeypatch.setattr(probes.psutil, "Process", FakeProcess)
    try:
        with pytest.raises(ProbeError, match="^PSUTIL Error: "):
            PsutilProbe().endpoints("12")
    finally:
        FakeProcess.error = None


def test_psutil_probe_rejects_non_numeric_pid():
    with pytest.raises(ProbeError, match="^PSUTIL Error: "):
        PsutilProbe().endpoints("abc")


def test_probes_module_uses_only_public_psutil_names():
    source = open(probes.__file__, encoding="utf-8").read()
    assert "psutil._common" not in source
