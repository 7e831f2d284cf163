"""Video selection: live checkbox list on a terminal, range prompt otherwise."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import IO, Callable, ContextManager, Iterator, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import prompt
from .logging_utils import get_logger
from .models import Video
from .selection import parse_selection
from .terminal import (
    BOLD,
    CHECKBOX_CHECKED,
    CHECKBOX_UNCHECKED,
    CLEAR_LINE,
    CYAN,
    DIM,
    GREEN,
    HIDE_CURSOR,
    MOVE_UP,
    RESET,
    SHOW_CURSOR,
    Key,
    is_terminal,
    raw_mode,
    read_key,
)

HEADING = "Choose videos to download:"
HELP_LINE = "Navigation: ↑↓/j/k  Toggle: Space  Confirm: Enter"
SELECTION_LEGEND = (
    "\nSelect videos:\n"
    "   • Single: '1' or '3,5,7'\n"
    "   • Range:  '1-5' or '1-3,7-9'\n"
    "   • All:    Press Enter"
)

console = Console(highlight=False)


class UserAbort(Exception):
    """The user cancelled the selection (Ctrl-C)."""


class SelectionState:
    """Cursor position and per-item flags of one interactive session."""

    def __init__(self, items: Sequence[Video], show_episode: bool = False):
        self.items = items
        self.selected = [True] * len(items)
        self.cursor = 0
        self.show_episode = show_episode
        self.highlight = True
        self.rendered = False
        self.episode_width = (
            max((len(v.episode) for v in items), default=0) if show_episode else 0
        )

    def move_up(self) -> None:
        self.cursor = (self.cursor - 1 + len(self.items)) % len(self.items)

    def move_down(self) -> None:
        self.cursor = (self.cursor + 1) % len(self.items)

    def toggle(self) -> None:
        self.selected[self.cursor] = not self.selected[self.cursor]
        self.move_down()

    def selected_indices(self) -> List[int]:
        return [i for i, flag in enumerate(self.selected) if flag]

    def handle(self, key: Key) -> Tuple[bool, bool]:
        """Apply one key press; returns ``(redraw, done)``."""
        if key is Key.ARROW_UP:
            self.move_up()
        elif key is Key.ARROW_DOWN:
            self.move_down()
        elif key is Key.SPACE:
            self.toggle()
        elif key is Key.ENTER:
            self.highlight = False
            return True, True
        elif key is Key.CTRL_C:
            raise UserAbort("aborted by user")
        else:
            return False, False
        return True, False

    def render(self, out: IO[str]) -> None:
        if self.rendered:
            # Back to the first item line; the help line has no newline
            out.write(MOVE_UP.format(len(self.items)))
        else:
            out.write(f"\r{CLEAR_LINE}{BOLD}{CYAN}{HEADING}{RESET}\n")

        for i, video in enumerate(self.items):
            out.write(self._line(video, self.selected[i], self.highlight and i == self.cursor))

        if not self.rendered:
            out.write(f"\r{CLEAR_LINE}{DIM}{HELP_LINE}{RESET}")
            self.rendered = True
        out.flush()

    def _line(self, video: Video, selected: bool, current: bool) -> str:
        box, color = (CHECKBOX_CHECKED, GREEN) if selected else (CHECKBOX_UNCHECKED, "")
        text = video.title
        if self.show_episode:
            text = f"{video.episode:<{self.episode_width}} {video.title}"
        style = BOLD if current else DIM
        return f"\r{CLEAR_LINE}  {color}{box}{RESET} {style}{text}{RESET}\n"


@contextmanager
def _hidden_cursor(out: IO[str]) -> Iterator[None]:
    out.write(HIDE_CURSOR)
    try:
        yield
    finally:
        out.write(f"\r\n{SHOW_CURSOR}")
        out.flush()


def select_interactive(
    items: Sequence[Video],
    show_episode: bool = False,
    *,
    read: Optional[Callable[[], Key]] = None,
    terminal_mode: Optional[Callable[[], ContextManager]] = None,
    out: Optional[IO[str]] = None,
) -> List[int]:
    """Let the user tick videos in a redrawn checkbox list.

    Every item starts selected, so a single Enter picks everything. Returns
    the sorted indices still ticked on Enter, which may be empty. Ctrl-C
    raises :class:`UserAbort`. The terminal mode and cursor are restored on
    every exit path.
    """
    if not items:
        return []
    out = out or sys.stdout
    read = read or (lambda: read_key(sys.stdin))
    terminal_mode = terminal_mode or (lambda: raw_mode(sys.stdin))

    state = SelectionState(items, show_episode)
    with terminal_mode(), _hidden_cursor(out):
        state.render(out)
        while True:
            redraw, done = state.handle(read())
            if redraw:
                state.render(out)
            if done:
                return state.selected_indices()


def render_video_table(videos: Sequence[Video], show_episode: bool = False) -> None:
    table = Table()
    table.add_column("Number", justify="right")
    if show_episode:
        table.add_column("Episode", justify="right")
    table.add_column("Title", justify="left", overflow="fold")
    for i, video in enumerate(videos, start=1):
        title = escape(video.title)
        row = [str(i), escape(video.episode), title] if show_episode else [str(i), title]
        table.add_row(*row)
    console.print(table)


def select_from_text(videos: Sequence[Video], show_episode: bool = False) -> List[int]:
    render_video_table(videos, show_episode)
    console.print(SELECTION_LEGEND)
    answer = prompt.ask("\nSelection: ")
    if not answer:
        return list(range(len(videos)))
    return parse_selection(answer, len(videos))


def select_videos(
    videos: Sequence[Video], select_all: bool = False, show_episode: bool = False
) -> List[int]:
    """Pick the videos to download, choosing the UI once per call."""
    if select_all or not videos:
        return list(range(len(videos)))
    if is_terminal(sys.stdin):
        indices = select_interactive(videos, show_episode)
    else:
        indices = select_from_text(videos, show_episode)
    get_logger().debug("Selected %d of %d videos", len(indices), len(videos))
    return indices


__all__ = [
    "SelectionState",
    "UserAbort",
    "select_interactive",
    "select_from_text",
    "select_videos",
    "render_video_table",
]
