"""Curses presenter: two list panes, a status line and the key loop."""

import contextlib
import curses
import queue
from typing import Dict, List, Optional, Sequence, Tuple

from .config import INPUT_TIMEOUT_MS, PAGE_STEP
from .messages import Message
from .model import Focus, ViewModel

HIGHLIGHT_SYMBOL = ">> "
FOCUS_PAIR = 1
MUTED_PAIR = 2
ALERT_PAIR = 3
OK_PAIR = 4

TOGGLE_KEYS = (ord("\t"), curses.KEY_LEFT, curses.KEY_RIGHT)
NEXT_KEYS = (curses.KEY_DOWN, ord("j"))
PREVIOUS_KEYS = (curses.KEY_UP, ord("k"))


def pane_rows(
    items: Sequence[str], selected: Optional[int], offset: int, visible: int
) -> Tuple[List[Tuple[str, bool]], int]:
    """Return the visible ``(text, highlighted)`` rows and the new scroll offset."""
    if visible <= 0:
        return [], 0
    if selected is not None and not 0 <= selected < len(items):
        selected = None
    if selected is not None:
        if selected < offset:
            offset = selected
        elif selected >= offset + visible:
            offset = selected - visible + 1
    offset = max(0, min(offset, max(0, len(items) - visible)))
    pad = " " * len(HIGHLIGHT_SYMBOL)
    rows: List[Tuple[str, bool]] = []
    for idx, item in enumerate(items[offset : offset + visible], start=offset):
        marked = idx == selected
        rows.append(((HIGHLIGHT_SYMBOL if marked else pad) + item, marked))
    return rows, offset


class Presenter:
    def __init__(self, model: ViewModel, inbox: "queue.Queue[Message]") -> None:
        self.model = model
        self.inbox = inbox
        self.offsets: Dict[Focus, int] = {Focus.ACTIVE: 0, Focus.HISTORY: 0}

    def run(self, stdscr: "curses._CursesWindow") -> None:
        with contextlib.suppress(curses.error):
            curses.curs_set(0)
        stdscr.timeout(INPUT_TIMEOUT_MS)
        self._init_colors()
        while True:
            self.render(stdscr)
            try:
                key = stdscr.getch()
            except KeyboardInterrupt:
                break
            if key != -1 and not self.handle_key(key):
                break
            self.drain()

    def drain(self) -> int:
        applied = 0
        while True:
            try:
                message = self.inbox.get_nowait()
            except queue.Empty:
                return applied
            self.model.apply(message)
            applied += 1

    def handle_key(self, key: int) -> bool:
        """Apply one key press; returns False when the user asked to quit."""
        if key == ord("q"):
            return False
        if key in TOGGLE_KEYS:
            self.model.toggle_focus()
        elif key in NEXT_KEYS:
            self.model.next()
        elif key in PREVIOUS_KEYS:
            self.model.previous()
        elif key == curses.KEY_NPAGE:
            for _ in range(PAGE_STEP):
                self.model.next()
        elif key == curses.KEY_PPAGE:
            for _ in range(PAGE_STEP):
                self.model.previous()
        return True

    @staticmethod
    def _init_colors() -> None:
        if not curses.has_colors():
            return
        curses.start_color()
        curses.use_default_colors()
        muted = 8 if curses.COLORS >= 16 else curses.COLOR_WHITE
        curses.init_pair(FOCUS_PAIR, curses.COLOR_CYAN, -1)
        curses.init_pair(MUTED_PAIR, muted, -1)
        curses.init_pair(ALERT_PAIR, curses.COLOR_RED, -1)
        curses.init_pair(OK_PAIR, curses.COLOR_GREEN, -1)

    @staticmethod
    def _attr(pair: int, fallback: int = curses.A_NORMAL) -> int:
        return curses.color_pair(pair) if curses.has_colors() else fallback

    def render(self, stdscr: "curses._CursesWindow") -> None:
        stdscr.erase()
        height, width = stdscr.getmaxyx()
        main_height = height - 1
        if main_height >= 3 and width >= 8:
            left_width = width // 2
            self._render_pane(
                stdscr,
                Focus.ACTIVE,
                0,
                left_width,
                main_height,
                f" Active Connections [{self.model.target_name}] ",
                self.model.active_connections,
            )
            self._render_pane(
                stdscr,
                Focus.HISTORY,
                left_width,
                width - left_width,
                main_height,
                " Connection History ",
                list(reversed(self.model.history_log)),
            )
        self._render_status(stdscr, height - 1, width)
        stdscr.refresh()

    def _render_pane(
        self,
        stdscr: "curses._CursesWindow",
        focus: Focus,
        x: int,
        width: int,
        height: int,
        title: str,
        items: Sequence[str],
    ) -> None:
        if self.model.focus is focus:
            border = self._attr(FOCUS_PAIR, curses.A_BOLD)
        else:
            border = self._attr(MUTED_PAIR, curses.A_DIM)
        self._draw_box(stdscr, 0, x, height, width, border)
        self._safe_addstr(stdscr, 0, x + 2, self._truncate(title, width - 4), border)

        inner = width - 2
        rows, self.offsets[focus] = pane_rows(
            items, self.model.selected(focus), self.offsets[focus], height - 2
        )
        for idx, (text, marked) in enumerate(rows):
            attr = curses.A_REVERSE | curses.A_BOLD if marked else curses.A_NORMAL
            line = self._truncate(text, inner)
            if marked:
                line = line.ljust(inner)
            self._safe_addstr(stdscr, 1 + idx, x + 1, line, attr)

    def _render_status(self, stdscr: "curses._CursesWindow", y: int, width: int) -> None:
        if self.model.status_is_alert():
            attr = self._attr(ALERT_PAIR, curses.A_BOLD)
        else:
            attr = self._attr(OK_PAIR)
        self._safe_addstr(stdscr, y, 0, self.model.last_status_msg.ljust(width), attr)

    def _draw_box(self, stdscr: "curses._CursesWindow", y: int, x: int, height: int, width: int, attr: int) -> None:
        if height < 2 or width < 2:
            return
        right = x + width - 1
        bottom = y + height - 1
        with contextlib.suppress(curses.error):
            stdscr.hline(y, x + 1, curses.ACS_HLINE | attr, width - 2)
            stdscr.hline(bottom, x + 1, curses.ACS_HLINE | attr, width - 2)
            stdscr.vline(y + 1, x, curses.ACS_VLINE | attr, height - 2)
            stdscr.vline(y + 1, right, curses.ACS_VLINE | attr, height - 2)
        for cy, cx, char in (
            (y, x, curses.ACS_ULCORNER),
            (y, right, curses.ACS_URCORNER),
            (bottom, x, curses.ACS_LLCORNER),
            (bottom, right, curses.ACS_LRCORNER),
        ):
            with contextlib.suppress(curses.error):
                stdscr.addch(cy, cx, char | attr)

    def _safe_addstr(self, stdscr: "curses._CursesWindow", y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
        height, width = stdscr.getmaxyx()
        if y < 0 or y >= height or x >= width:
            return
        if not text:
            return
        trimmed = text[: max(0, width - x)]
        try:
            stdscr.addstr(y, x, trimmed, attr)
        except curses.error:
            pass

    @staticmethod
    def _truncate(text: str, width: int) -> str:
        if width <= 0:
            return ""
        if len(text) <= width:
            return text
        if width <= 3:
            return text[:width]
        return text[: width - 3] + "..."
