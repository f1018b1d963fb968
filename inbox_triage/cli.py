import argparse
import logging
import sys
from typing import List

from rich.console import Console
from rich.table import Table

from .config import Config, load_config
from .logging_config import setup_logging
from .gmail_client import GmailClientError, build_gmail_service, load_inbox
from .models import Disposition, Email
from .triage_engine import NO_EMAILS_MESSAGE, TriageSession, sort_for_review

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _render_review_table(emails: List[Email], console: Console) -> None:
    table = Table(title="Review Order")

    table.add_column("#")
    table.add_column("Domain")
    table.add_column("Sender")
    table.add_column("Date")
    table.add_column("Subject")

    for idx, e in enumerate(emails, start=1):
        received = e.received_at.strftime("%Y-%m-%d %H:%M") if e.received_at else str(e.date)
        table.add_row(
            str(idx),
            e.from_domain,
            e.from_name,
            received,
            e.subject,
        )

    console.print(table)


def _render_counts_table(session: TriageSession, console: Console) -> None:
    table = Table(title="Dispositions")

    table.add_column("Status")
    table.add_column("Messages", justify="right")

    for disposition, count in session.counts().items():
        table.add_row(disposition.value, str(count))

    console.print(table)


def _setup(args: argparse.Namespace) -> Config:
    config = load_config()
    if args.label:
        config.gmail_label_ids = args.label
    setup_logging(level=config.log_level, log_file=config.log_file, console=False)
    return config


def _load_review_order(config: Config, console: Console) -> List[Email]:
    service = build_gmail_service(config)

    with console.status("Reading inbox...") as status:
        emails = load_inbox(
            service,
            lambda count: status.update(f"Read {count} emails"),
            label_ids=config.gmail_label_ids,
            page_size=config.gmail_page_size,
            num_retries=config.gmail_num_retries,
        )

    return sort_for_review(emails)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_triage(args: argparse.Namespace) -> int:
    from .screen import run_curses_session

    config = _setup(args)
    console = Console()

    emails = _load_review_order(config, console)
    if not emails:
        console.print(NO_EMAILS_MESSAGE)
        return 0

    session = run_curses_session(TriageSession(emails))

    if session.records:
        _render_counts_table(session, console)
    if session.message:
        console.print(session.message)

    pending_review = session.counts()[Disposition.default()]
    logger.info("Session ended with %d messages left in the inbox", pending_review)
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    config = _setup(args)
    console = Console()

    emails = _load_review_order(config, console)
    if not emails:
        console.print(NO_EMAILS_MESSAGE)
        return 0

    _render_review_table(emails, console)
    return 0


# ---------------------------------------------------------------------------
# Main CLI entrypoint
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inbox-triage",
        description="Keyboard-driven Gmail inbox triage.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    label_kwargs = dict(
        action="append",
        default=None,
        metavar="LABEL_ID",
        help="Gmail label id to review (repeatable). Default: GMAIL_LABEL_IDS or INBOX.",
    )

    # triage
    p_triage = subparsers.add_parser(
        "triage",
        help="Review messages one at a time and assign dispositions.",
    )
    p_triage.add_argument("--label", **label_kwargs)

    # preview
    p_preview = subparsers.add_parser(
        "preview",
        help="Print the review order without entering the interactive screen.",
    )
    p_preview.add_argument("--label", **label_kwargs)

    return parser


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "triage":
            code = cmd_triage(args)
        elif args.command == "preview":
            code = cmd_preview(args)
        else:
            parser.error(f"Unknown command: {args.command!r}")
    except GmailClientError as e:
        logger.error("Gmail setup failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
