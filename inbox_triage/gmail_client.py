"""
Gmail client integration.

Provides:
- build_gmail_service: OAuth2 login + service construction
- list_message_ids: page through message ids carrying the given labels
- fetch_message: get one full message resource
- load_inbox: ids -> messages -> normalized Email records
"""

import logging
from typing import Callable, List, Optional, Sequence

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from google.auth.transport.requests import Request

from .config import Config
from .models import Email
from .normalizer import normalize_message

logger = logging.getLogger(__name__)

# Triage never writes back to Gmail
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]

ProgressCallback = Callable[[int], None]


class GmailClientError(Exception):
    """Raised when the Gmail service cannot be set up."""


# ---------------------------------------------------------------------------
# OAuth + service
# ---------------------------------------------------------------------------


def build_gmail_service(config: Config):
    """
    Build and return an authorized Gmail API service.

    Uses:
    - config.gmail_credentials_path: client secret JSON from Google Cloud Console
    - config.gmail_token_path: where to store the user's access/refresh token

    First run will open a browser window for OAuth consent.
    """
    creds: Optional[Credentials] = None
    token_path = config.gmail_token_path
    credentials_path = config.gmail_credentials_path

    if token_path.exists():
        logger.info("Loading Gmail credentials from %s", token_path)
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            logger.info("Refreshing expired Gmail credentials.")
            creds.refresh(Request())
        else:
            if not credentials_path.exists():
                raise GmailClientError(
                    f"Gmail client secret not found at {credentials_path}"
                )
            logger.info("Running new Gmail OAuth flow using %s", credentials_path)
            flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
            creds = flow.run_local_server(port=0)

        token_path.parent.mkdir(parents=True, exist_ok=True)
        token_path.write_text(creds.to_json(), encoding="utf-8")

    return build("gmail", "v1", credentials=creds)


# ---------------------------------------------------------------------------
# Listing message ids
# ---------------------------------------------------------------------------


def list_message_ids(
    service,
    label_ids: Sequence[str] = ("INBOX",),
    page_size: int = 100,
    num_retries: int = 0,
) -> List[str]:
    """
    Collect the ids of every message carrying `label_ids`, page by page.

    Ids on a page are kept before its continuation token is looked at, so the
    last page is never lost. A failed page request ends the listing with
    whatever was collected so far.
    """
    ids: List[str] = []
    page_token: Optional[str] = None

    while True:
        request_kwargs = {
            "userId": "me",
            "labelIds": list(label_ids),
            "maxResults": page_size,
        }
        if page_token:
            request_kwargs["pageToken"] = page_token

        try:
            response = (
                service.users()
                .messages()
                .list(**request_kwargs)
                .execute(num_retries=num_retries)
            )
        except (HttpError, httplib2.HttpLib2Error, OSError) as e:
            logger.warning("Error listing messages from Gmail: %s", e)
            break

        message_refs = response.get("messages")
        if message_refs is None:
            break

        for msg_ref in message_refs:
            msg_id = msg_ref.get("id")
            if not msg_id:
                continue
            ids.append(msg_id)

        page_token = response.get("nextPageToken")
        if not page_token:
            break

    logger.info("Listed %d message ids with labels %s", len(ids), list(label_ids))
    return ids


# ---------------------------------------------------------------------------
# Fetching messages
# ---------------------------------------------------------------------------


def fetch_message(service, msg_id: str, num_retries: int = 0) -> Optional[dict]:
    """Fetch one full message resource, or None if Gmail refuses."""
    try:
        return (
            service.users()
            .messages()
            .get(userId="me", id=msg_id, format="full")
            .execute(num_retries=num_retries)
        )
    except (HttpError, httplib2.HttpLib2Error, OSError) as e:
        logger.warning("Error fetching message %s: %s", msg_id, e)
        return None


def load_inbox(
    service,
    progress: ProgressCallback,
    label_ids: Sequence[str] = ("INBOX",),
    page_size: int = 100,
    num_retries: int = 0,
) -> List[Email]:
    """
    Load and normalize every message with the given labels.

    `progress` is called once per id, before it is fetched, with the number of
    records loaded so far. Messages that fail to fetch or normalize are skipped.
    """
    emails: List[Email] = []
    ids = list_message_ids(
        service,
        label_ids=label_ids,
        page_size=page_size,
        num_retries=num_retries,
    )

    for msg_id in ids:
        progress(len(emails))

        message = fetch_message(service, msg_id, num_retries=num_retries)
        if message is None:
            continue

        email = normalize_message(message)
        if email is None:
            continue
        emails.append(email)

    logger.info("Loaded %d of %d messages", len(emails), len(ids))
    return emails
