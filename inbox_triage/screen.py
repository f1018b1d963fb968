"""
Curses front end for a TriageSession.
"""

import curses
import logging

from .models import SessionView
from .triage_engine import TriageSession, run_session

logger = logging.getLogger(__name__)

ENTER_KEYS = ("\n", "\r")


def _format_date(view: SessionView) -> str:
    received_at = view.email.received_at
    if received_at is None:
        return str(view.email.date)
    return f"{received_at:%Y-%m-%d %H:%M} UTC"


def render_text(view: SessionView) -> str:
    email = view.email
    return (
        f"Status: {view.position} of {view.total} {email.status}\n\n"
        f"Date: {_format_date(view)}\n\n"
        f"From: {email.sender}\n\n"
        f"Subject: {email.subject}\n\n"
        f"{email.body}"
    )


def command_line(view: SessionView) -> str:
    line = f"Command: {view.last_key.strip()}"
    if view.pending is not None:
        line += f" -> {view.pending}"
    return line


class CursesScreen:
    """Presenter backed by a curses window."""

    def __init__(self, stdscr):
        self.stdscr = stdscr

    def _addstr(self, y: int, x: int, text: str) -> None:
        try:
            self.stdscr.addstr(y, x, text)
        except curses.error:
            # writing the bottom-right cell moves the cursor off screen
            pass

    def render(self, view: SessionView) -> None:
        max_y, max_x = self.stdscr.getmaxyx()
        self.stdscr.clear()

        lines = render_text(view).splitlines()
        for y, line in enumerate(lines[: max(max_y - 1, 0)]):
            self._addstr(y, 0, line[:max_x])

        self._addstr(max_y - 1, 0, command_line(view)[: max_x - 1])
        self.stdscr.refresh()

    def read_key(self) -> str:
        key = self.stdscr.get_wch()
        if isinstance(key, str):
            if key in ENTER_KEYS:
                return "\n"
            return key
        if key == curses.KEY_ENTER:
            return "\n"
        return ""

    def show_message(self, text: str) -> None:
        self.stdscr.clear()
        self._addstr(0, 0, text)
        self.stdscr.refresh()


def run_curses_session(session: TriageSession) -> TriageSession:
    """Run a session full-screen, restoring the terminal afterwards."""

    def _main(stdscr) -> TriageSession:
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        return run_session(session, CursesScreen(stdscr))

    logger.info("Starting triage of %d messages", len(session.records))
    return curses.wrapper(_main)
