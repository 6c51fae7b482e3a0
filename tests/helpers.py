from typing import Dict, List, Sequence, Union

LSOF_HEADER = "COMMAND   PID USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME\n"

Response = Union[bytes, BaseException]


def lsof_line(remote: str, local: str = "10.0.0.5:51000", port: int = 443) -> str:
    return f"curl    4242 alice    5u  IPv4 0x1a2b3c      0t0  TCP {local}->{remote}:{port} (ESTABLISHED)\n"


def lsof_output(*remotes: str) -> bytes:
    return (LSOF_HEADER + "".join(lsof_line(remote) for remote in remotes)).encode("utf-8")


class ScriptedRunner:
    """Replays canned stdout per tool; the last response repeats once exhausted."""

    def __init__(self, pgrep: Sequence[Response], lsof: Sequence[Response] = (b"",)) -> None:
        self.responses: Dict[str, List[Response]] = {"pgrep": list(pgrep), "sudo": list(lsof)}
        self.calls: List[List[str]] = []

    def __call__(self, cmd: List[str]) -> bytes:
        self.calls.append(list(cmd))
        script = self.responses[cmd[0]]
        response = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(response, BaseException):
            raise response
        return response
