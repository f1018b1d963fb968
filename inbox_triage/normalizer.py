"""
Turn raw Gmail API message resources into Email records.

Messages missing a mandatory field (headers, From, snippet, internalDate, id)
are dropped rather than half-filled.
"""

import logging
import re
from typing import List, Optional, Tuple

from .models import Email

logger = logging.getLogger(__name__)

INTERNAL_DATE_RE = re.compile(r"[+-]?[0-9]+")


def _parse_header(headers: List[dict], name: str) -> Optional[str]:
    """Extract a header value (case-insensitive) from Gmail message headers."""
    for h in headers:
        header_name = h.get("name")
        if header_name is None:
            continue
        if header_name.lower() == name.lower():
            return h.get("value")
    return None


def _choose_sender_address(headers: List[dict], from_value: str) -> str:
    """
    Pick the address to group on.

    Some providers return a From header listing several addresses; in that
    case the Sender header is used instead.
    """
    fields = from_value.split(",")
    if len(fields) == 1:
        return fields[0]
    return _parse_header(headers, "sender") or ""


def _split_address(address: str) -> Tuple[str, str]:
    parts = address.split("@")
    from_name = parts[0] if len(parts) > 0 else ""
    from_domain = parts[1] if len(parts) > 1 else ""
    return from_name, from_domain


def _parse_internal_date(value) -> Optional[int]:
    """internalDate is a decimal string; anything looser is treated as missing."""
    if value is None:
        return None
    text = str(value)
    if not text.isascii() or not INTERNAL_DATE_RE.fullmatch(text):
        return None
    return int(text)


def normalize_message(message: dict) -> Optional[Email]:
    """
    Build an Email from a `users.messages.get` response, or return None.
    """
    msg_id = message.get("id")

    payload = message.get("payload")
    if not isinstance(payload, dict):
        logger.debug("Dropping message %s: no payload.", msg_id)
        return None
    headers = payload.get("headers")
    if not isinstance(headers, list):
        logger.debug("Dropping message %s: no headers.", msg_id)
        return None

    subject = _parse_header(headers, "subject") or ""

    from_value = _parse_header(headers, "from")
    if from_value is None:
        logger.debug("Dropping message %s: no From header.", msg_id)
        return None
    from_name, from_domain = _split_address(_choose_sender_address(headers, from_value))

    date = _parse_internal_date(message.get("internalDate"))
    if date is None:
        logger.debug(
            "Dropping message %s: unparseable internalDate %r.",
            msg_id,
            message.get("internalDate"),
        )
        return None

    snippet = message.get("snippet")
    if snippet is None:
        logger.debug("Dropping message %s: no snippet.", msg_id)
        return None

    if not msg_id:
        logger.debug("Dropping message without an id.")
        return None

    return Email(
        id=msg_id,
        subject=subject,
        from_name=from_name,
        from_domain=from_domain,
        body=snippet,
        date=date,
    )
