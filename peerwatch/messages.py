from dataclasses import dataclass, field
from typing import List, Union


@dataclass
class DataUpdate:
    active: List[str]
    new_history_entries: List[str] = field(default_factory=list)
    pid_msg: str = ""


@dataclass
class PollError:
    message: str


Message = Union[DataUpdate, PollError]
