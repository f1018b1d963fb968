"""
Triage engine: review ordering and the interactive command state machine.

Core pieces:
- sort_for_review: group messages by sender so runs can be labelled at once
- Command / KEY_BINDINGS: the keyboard command surface
- TriageSession: working set, cursor, and pending disposition
- run_session: drive a session against any Presenter
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from .models import Disposition, Email, SessionView

logger = logging.getLogger(__name__)

NO_EMAILS_MESSAGE = "No emails"


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def sort_for_review(emails: Iterable[Email]) -> List[Email]:
    """
    Return emails ordered by (domain, name, date), descending.

    Messages from one sender end up next to each other, and messages with an
    identical key keep their input order.
    """
    return sorted(
        emails,
        key=lambda e: (e.from_domain, e.from_name, e.date),
        reverse=True,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class Command(Enum):
    QUIT = "quit"
    MARK_INBOX = "mark_inbox"
    MARK_FOLLOW_UP = "mark_follow_up"
    MARK_READ_THROUGH = "mark_read_through"
    MARK_ARCHIVE = "mark_archive"
    JUMP_TO_START = "jump_to_start"
    ADVANCE = "advance"
    RETREAT = "retreat"
    PROPAGATE_SENDER = "propagate_sender"
    PROPAGATE_DOMAIN = "propagate_domain"
    COMMIT = "commit"
    REDRAW = "redraw"


KEY_BINDINGS: Dict[str, Command] = {
    "q": Command.QUIT,
    "i": Command.MARK_INBOX,
    "f": Command.MARK_FOLLOW_UP,
    "r": Command.MARK_READ_THROUGH,
    "a": Command.MARK_ARCHIVE,
    "0": Command.JUMP_TO_START,
    "j": Command.ADVANCE,
    "k": Command.RETREAT,
    "p": Command.PROPAGATE_SENDER,
    "d": Command.PROPAGATE_DOMAIN,
    "w": Command.COMMIT,
    "\n": Command.REDRAW,
}

MARK_COMMANDS: Dict[Command, Disposition] = {
    Command.MARK_INBOX: Disposition.INBOX,
    Command.MARK_FOLLOW_UP: Disposition.FOLLOW_UP,
    Command.MARK_READ_THROUGH: Disposition.READ_THROUGH,
    Command.MARK_ARCHIVE: Disposition.ARCHIVE,
}


def command_for_key(key: str) -> Optional[Command]:
    """Map a keypress to a Command; unbound keys give None."""
    return KEY_BINDINGS.get(key)


def _same_sender(a: Email, b: Email) -> bool:
    return a.from_name == b.from_name and a.from_domain == b.from_domain


def _same_domain(a: Email, b: Email) -> bool:
    return a.from_domain == b.from_domain


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class TriageSession:
    """
    Interactive review state over an ordered working set.

    A disposition chosen with one of the mark commands is only staged
    (`pending`); it lands on a record when the operator moves off it with
    advance, retreat, or one of the propagate commands.
    """

    def __init__(self, emails: Iterable[Email]):
        self.records: List[Email] = list(emails)
        self.cursor: int = 0
        self.pending: Optional[Disposition] = None
        self.last_key: str = ""
        self.done: bool = False
        self.message: Optional[str] = None

        if not self.records:
            self._finish(NO_EMAILS_MESSAGE)

    @property
    def current(self) -> Email:
        self.clamp_cursor()
        return self.records[self.cursor]

    def clamp_cursor(self) -> None:
        if self.records and self.cursor >= len(self.records):
            self.cursor = len(self.records) - 1

    def view(self) -> SessionView:
        email = self.current
        return SessionView(
            position=self.cursor + 1,
            total=len(self.records),
            email=email.model_copy(),
            pending=self.pending,
            last_key=self.last_key,
        )

    def counts(self) -> Dict[Disposition, int]:
        totals = {d: 0 for d in Disposition}
        for email in self.records:
            totals[email.status] += 1
        return totals

    # -- command handling ---------------------------------------------------

    def handle_key(self, key: str) -> None:
        """Apply the command bound to `key`; unbound keys change nothing."""
        command = command_for_key(key)
        if self.done or command is None:
            return
        self.last_key = key
        self.handle(command)

    def handle(self, command: Optional[Command]) -> None:
        if self.done or command is None:
            return

        logger.debug(
            "Command %s at %d/%d (pending=%s)",
            command.name,
            self.cursor,
            len(self.records),
            self.pending,
        )

        if command in MARK_COMMANDS:
            self.pending = MARK_COMMANDS[command]
        elif command == Command.ADVANCE:
            self._apply_pending(self.current)
            self.cursor = min(self.cursor + 1, len(self.records) - 1)
            self.pending = None
        elif command == Command.RETREAT:
            self._apply_pending(self.current)
            self.cursor = max(self.cursor - 1, 0)
            self.pending = None
        elif command == Command.PROPAGATE_SENDER:
            self._propagate(_same_sender)
        elif command == Command.PROPAGATE_DOMAIN:
            self._propagate(_same_domain)
        elif command == Command.JUMP_TO_START:
            # pending is deliberately left staged
            self.cursor = 0
        elif command == Command.COMMIT:
            self._commit()
        elif command == Command.QUIT:
            self.pending = None
            self._finish(None)

    def _apply_pending(self, email: Email) -> None:
        if self.pending is not None:
            email.status = self.pending

    def _propagate(self, matches: Callable[[Email, Email], bool]) -> None:
        anchor = self.current
        self._apply_pending(anchor)

        j = self.cursor
        while j < len(self.records) and matches(self.records[j], anchor):
            self._apply_pending(self.records[j])
            j += 1

        self.cursor = min(j, len(self.records) - 1)
        self.pending = None

    def _commit(self) -> None:
        before = len(self.records)
        self.records = [e for e in self.records if e.status != Disposition.default()]
        logger.info("Commit kept %d of %d records", len(self.records), before)

        if not self.records:
            self._finish(NO_EMAILS_MESSAGE)
            return
        self.cursor = 0

    def _finish(self, message: Optional[str]) -> None:
        self.done = True
        self.message = message


# ---------------------------------------------------------------------------
# Driving a session
# ---------------------------------------------------------------------------


class Presenter(Protocol):
    def render(self, view: SessionView) -> None: ...

    def read_key(self) -> str: ...

    def show_message(self, text: str) -> None: ...


def run_session(session: TriageSession, presenter: Presenter) -> TriageSession:
    """Render, read a key, apply it; repeat until the session is done."""
    while not session.done:
        presenter.render(session.view())
        session.handle_key(presenter.read_key())

    if session.message:
        presenter.show_message(session.message)
    return session
