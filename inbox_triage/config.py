from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables and .env file.
    """

    # Gmail OAuth
    gmail_credentials_path: Path = Field(
        default=Path("credentials.json"),
        alias="GMAIL_CREDENTIALS_PATH",
    )
    gmail_token_path: Path = Field(
        default=Path("token.json"),
        alias="GMAIL_TOKEN_PATH",
    )

    # Inbox loading
    gmail_label_ids: List[str] = Field(
        default_factory=lambda: ["INBOX"],
        alias="GMAIL_LABEL_IDS",
    )
    gmail_page_size: int = Field(
        default=100,
        ge=1,
        le=500,
        alias="GMAIL_PAGE_SIZE",
    )
    gmail_num_retries: int = Field(
        default=0,
        ge=0,
        alias="GMAIL_NUM_RETRIES",
    )

    # Logging; the interactive screen owns the terminal, so logs go to a file
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(
        default=Path("logs") / "inbox_triage.log",
        alias="LOG_FILE",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def load_config() -> "Config":
    return Config()
