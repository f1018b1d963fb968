"""
Shared test fixtures and configuration for pytest
"""
from types import SimpleNamespace

import pytest
from googleapiclient.errors import HttpError

from inbox_triage.models import Disposition, Email


def _make_http_error(status=500, reason="Backend Error"):
    return HttpError(SimpleNamespace(status=status, reason=reason), b"")


def _make_message(
    msg_id="m1",
    sender="alice@example.com",
    subject="Hello",
    snippet="Snippet text",
    internal_date="1700000000000",
    extra_headers=None,
):
    """Build a dict shaped like a Gmail users.messages.get response."""
    headers = [{"name": "From", "value": sender}, {"name": "Subject", "value": subject}]
    headers.extend(extra_headers or [])
    return {
        "id": msg_id,
        "threadId": msg_id,
        "snippet": snippet,
        "internalDate": internal_date,
        "payload": {"mimeType": "text/plain", "headers": headers},
    }


class FakeRequest:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.num_retries = None

    def execute(self, num_retries=0):
        self.num_retries = num_retries
        if self.error is not None:
            raise self.error
        return self.result


class FakeMessages:
    def __init__(self, pages, messages):
        self.pages = pages
        self.messages = messages
        self.list_calls = []
        self.get_calls = []
        self.requests = []

    def list(self, **kwargs):
        self.list_calls.append(kwargs)
        page = self.pages[len(self.list_calls) - 1]
        if isinstance(page, Exception):
            request = FakeRequest(error=page)
        else:
            request = FakeRequest(result=page)
        self.requests.append(request)
        return request

    def get(self, userId, id, format):
        self.get_calls.append(id)
        message = self.messages.get(id)
        if isinstance(message, Exception):
            request = FakeRequest(error=message)
        else:
            request = FakeRequest(result=message)
        self.requests.append(request)
        return request


class FakeGmailService:
    """Stand-in for the googleapiclient Gmail resource chain."""

    def __init__(self, pages, messages=None):
        self._messages = FakeMessages(pages, messages or {})

    def users(self):
        return SimpleNamespace(messages=lambda: self._messages)

    @property
    def fake(self):
        return self._messages


@pytest.fixture
def make_http_error():
    return _make_http_error


@pytest.fixture
def make_message():
    return _make_message


@pytest.fixture
def gmail_service_factory():
    return FakeGmailService


@pytest.fixture
def email_factory():
    counter = {"n": 0}

    def _make(from_name="alice", from_domain="example.com", date=None, status=Disposition.INBOX, **kwargs):
        counter["n"] += 1
        return Email(
            id=kwargs.pop("id", f"msg-{counter['n']}"),
            subject=kwargs.pop("subject", f"Subject {counter['n']}"),
            from_name=from_name,
            from_domain=from_domain,
            body=kwargs.pop("body", "body"),
            date=date if date is not None else counter["n"],
            status=status,
        )

    return _make
