from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

from network.constants import DEFAULT_PROCESS_FILTER


def _load_version() -> str:
    version_path = Path(__file__).resolve().parent / "VERSION"
    try:
        return version_path.read_text().strip()
    except FileNotFoundError:
        return "0.1.0"


class Settings(BaseSettings):
    """Application configuration using Pydantic settings."""

    # Application
    APP_NAME: str = "netstat-stats"
    APP_VERSION: str = _load_version()
    DEBUG: bool = False

    # Logging (stderr; stdout carries the report)
    LOG_LEVEL: str = "WARNING"

    # ── Reporting ─────────────────────────────────────────────────────
    # Process whose connections get their own column set
    PROCESS_FILTER: Optional[str] = DEFAULT_PROCESS_FILTER

    # Report format override: csv, table or json (None = per capture mode)
    REPORT_FORMAT: Optional[str] = None

    # Width of the "<STATE> (total/<process>):" column in table reports
    TABLE_LABEL_WIDTH: int = 32

    TIMESTAMP_OUTPUT_FORMAT: str = "%m/%d/%y %H:%M"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
