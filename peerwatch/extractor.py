"""Remote endpoint extraction from ``lsof -i -P -n`` listings."""

import ipaddress
from functools import cmp_to_key
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union

ARROW = "->"


def _decode(raw: Union[bytes, str]) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


def _candidate(line: str) -> Optional[str]:
    pos = line.find(ARROW)
    if pos == -1:
        return None
    tail = line[pos + len(ARROW) :].lstrip(" \t")
    end = len(tail)
    for idx, char in enumerate(tail):
        if char.isspace() or char == ":":
            end = idx
            break
    candidate = tail[:end]
    if not candidate or ("." not in candidate and ":" not in candidate):
        return None
    if candidate.startswith("[") and candidate.endswith("]"):
        candidate = candidate[1:-1]
    return candidate


def iter_endpoints(raw: Union[bytes, str]) -> Iterator[str]:
    """Yield remote endpoints in listing order, duplicates included.

    The first line is the column header and is skipped. Only the text between
    the ``->`` arrow and the first blank or colon is kept, so unbracketed IPv6
    peers (``2001:db8::1:443``) truncate to ``2001`` and are dropped.
    """
    for line in _decode(raw).splitlines()[1:]:
        candidate = _candidate(line)
        if candidate:
            yield candidate


def extract_endpoints(raw: Union[bytes, str]) -> Set[str]:
    return set(iter_endpoints(raw))


def _parse_ip(text: str) -> Optional[Tuple[int, int]]:
    try:
        addr = ipaddress.ip_address(text)
    except ValueError:
        return None
    return addr.version, int(addr)


def compare_endpoints(a: str, b: str) -> int:
    ip_a = _parse_ip(a)
    ip_b = _parse_ip(b)
    if ip_a is not None and ip_b is not None and ip_a != ip_b:
        return -1 if ip_a < ip_b else 1
    if a == b:
        return 0
    return -1 if a < b else 1


def sort_endpoints(endpoints: Iterable[str]) -> List[str]:
    return sorted(endpoints, key=cmp_to_key(compare_endpoints))
