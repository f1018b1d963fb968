"""
Pydantic models for triage dispositions, email records, and screen snapshots.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Disposition(str, Enum):
    """
    Where a message should end up once triage is done.

    Members compare in declaration order, not by their string values.
    """

    INBOX = "Inbox"
    FOLLOW_UP = "FollowUp"
    READ_THROUGH = "ReadThrough"
    ARCHIVE = "Archive"

    @classmethod
    def default(cls) -> "Disposition":
        return cls.INBOX

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __str__(self) -> str:
        return self.value

    def __lt__(self, other):
        if not isinstance(other, Disposition):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Disposition):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Disposition):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Disposition):
            return NotImplemented
        return self.rank >= other.rank


# ---------------------------------------------------------------------------
# Email records
# ---------------------------------------------------------------------------


class Email(BaseModel):
    """
    One inbox message under review.

    Everything except `status` is fixed when the message is loaded; `date` is
    Gmail's internalDate (milliseconds since the epoch) and is only used for
    ordering and display.
    """

    id: str = Field(min_length=1, frozen=True)
    subject: str = Field(default="", frozen=True)
    from_name: str = Field(default="", frozen=True)
    from_domain: str = Field(default="", frozen=True)
    body: str = Field(default="", frozen=True)
    date: int = Field(frozen=True)
    status: Disposition = Disposition.INBOX

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=False,
        validate_assignment=True,
    )

    @property
    def sender(self) -> str:
        return f"{self.from_name}@{self.from_domain}"

    @property
    def received_at(self) -> Optional[datetime]:
        try:
            return datetime.fromtimestamp(self.date / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None


# ---------------------------------------------------------------------------
# Presentation snapshots
# ---------------------------------------------------------------------------


class SessionView(BaseModel):
    """
    Read-only snapshot of the triage session for the screen.

    `email` is a copy, so nothing the screen does can reach the working set.
    """

    position: int
    total: int
    email: Email
    pending: Optional[Disposition] = None
    last_key: str = ""

    model_config = ConfigDict(frozen=True)


__all__ = [
    "Disposition",
    "Email",
    "SessionView",
]
