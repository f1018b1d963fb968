import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from inbox_triage.config import load_config
from inbox_triage.logging_config import setup_logging


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for var in (
        "GMAIL_CREDENTIALS_PATH",
        "GMAIL_TOKEN_PATH",
        "GMAIL_LABEL_IDS",
        "GMAIL_PAGE_SIZE",
        "GMAIL_NUM_RETRIES",
        "LOG_LEVEL",
        "LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = load_config()
    assert config.gmail_credentials_path == Path("credentials.json")
    assert config.gmail_token_path == Path("token.json")
    assert config.gmail_label_ids == ["INBOX"]
    assert config.gmail_page_size == 100
    assert config.gmail_num_retries == 0
    assert config.log_level == "INFO"


def test_environment_overrides(clean_env):
    clean_env.setenv("GMAIL_LABEL_IDS", '["INBOX", "UNREAD"]')
    clean_env.setenv("GMAIL_PAGE_SIZE", "50")
    clean_env.setenv("GMAIL_NUM_RETRIES", "2")
    clean_env.setenv("LOG_FILE", "triage.log")

    config = load_config()

    assert config.gmail_label_ids == ["INBOX", "UNREAD"]
    assert config.gmail_page_size == 50
    assert config.gmail_num_retries == 2
    assert config.log_file == Path("triage.log")


def test_dotenv_file(clean_env, tmp_path):
    (tmp_path / ".env").write_text("GMAIL_PAGE_SIZE=10\n", encoding="utf-8")
    assert load_config().gmail_page_size == 10


def test_page_size_bounds(clean_env):
    clean_env.setenv("GMAIL_PAGE_SIZE", "501")
    with pytest.raises(ValidationError):
        load_config()


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "triage.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(level="debug", log_file=log_file, console=False)
        logging.getLogger("inbox_triage.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        assert "hello file" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
