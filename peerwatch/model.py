import enum
from typing import List, Optional, Set

from .config import INITIAL_STATUS, SEEN_IPS_WINDOW
from .messages import DataUpdate, Message, PollError


class Focus(enum.Enum):
    ACTIVE = "active"
    HISTORY = "history"


class ViewModel:
    """UI state owned by the presenter thread.

    Selections index the lists as displayed (history newest first) and are not
    clipped when a list shrinks; renderers must treat out-of-range indices as
    "nothing selected".
    """

    def __init__(self, target: str) -> None:
        self.target_name = target
        self.active_connections: List[str] = []
        self.history_log: List[str] = []
        self.seen_ips: Set[str] = set()
        self.last_status_msg = INITIAL_STATUS
        self.focus = Focus.ACTIVE
        self.active_selected: Optional[int] = None
        self.history_selected: Optional[int] = None

    def apply(self, message: Message) -> None:
        if isinstance(message, DataUpdate):
            self.apply_data_update(message.active, message.new_history_entries, message.pid_msg)
        elif isinstance(message, PollError):
            self.apply_error(message.message)
        else:
            raise TypeError(f"unexpected message: {message!r}")

    def apply_data_update(self, active: List[str], new_entries: List[str], pid_msg: str) -> None:
        self.active_connections = list(active)
        self.history_log.extend(new_entries)
        self.last_status_msg = pid_msg
        self.update_seen_ips()

    def apply_error(self, msg: str) -> None:
        self.last_status_msg = msg
        self.active_connections = []

    def update_seen_ips(self) -> None:
        seen_ips: Set[str] = set()
        for entry in self.history_log[-SEEN_IPS_WINDOW:]:
            tokens = entry.split()
            if tokens:
                seen_ips.add(tokens[-1])
        self.seen_ips = seen_ips

    def toggle_focus(self) -> None:
        self.focus = Focus.HISTORY if self.focus is Focus.ACTIVE else Focus.ACTIVE

    def length(self, focus: Focus) -> int:
        if focus is Focus.ACTIVE:
            return len(self.active_connections)
        return len(self.history_log)

    def selected(self, focus: Focus) -> Optional[int]:
        if focus is Focus.ACTIVE:
            return self.active_selected
        return self.history_selected

    def _select(self, index: int) -> None:
        if self.focus is Focus.ACTIVE:
            self.active_selected = index
        else:
            self.history_selected = index

    def next(self) -> None:
        size = self.length(self.focus)
        if size == 0:
            return
        current = self.selected(self.focus)
        if current is None:
            self._select(0)
        elif current >= size - 1:
            self._select(0)
        else:
            self._select(current + 1)

    def previous(self) -> None:
        size = self.length(self.focus)
        if size == 0:
            return
        current = self.selected(self.focus)
        if current is None:
            self._select(0)
        elif current == 0:
            self._select(size - 1)
        else:
            self._select(current - 1)

    def status_is_alert(self) -> bool:
        return "Error" in self.last_status_msg or "Wait" in self.last_status_msg
