"""
Application configuration read from environment variables (and .env).
"""

import os
from pathlib import Path
from typing import Final, Optional

from dotenv import load_dotenv

load_dotenv()


def _timeout(raw: str) -> Optional[float]:
    return float(raw) if raw.strip() else None


class Config:
    API_URL: Final[str] = os.getenv("BUDGET_API_URL", "http://localhost:3001/api")
    STORAGE_PATH: Final[Path] = Path(os.getenv("BUDGET_STORAGE_PATH", ".budget_state.json"))
    LOG_LEVEL: Final[str] = os.getenv("BUDGET_LOG_LEVEL", "INFO")
    REQUEST_TIMEOUT_RAW: Final[str] = os.getenv("BUDGET_REQUEST_TIMEOUT", "")

    @classmethod
    def request_timeout(cls) -> Optional[float]:
        """Seconds per request, None for the transport default."""
        return _timeout(cls.REQUEST_TIMEOUT_RAW)

    @classmethod
    def validate(cls) -> None:
        if not cls.API_URL.strip():
            raise ValueError("BUDGET_API_URL is empty")
        try:
            timeout = cls.request_timeout()
        except ValueError:
            raise ValueError(f"BUDGET_REQUEST_TIMEOUT is not a number: {cls.REQUEST_TIMEOUT_RAW!r}")
        if timeout is not None and timeout <= 0:
            raise ValueError("BUDGET_REQUEST_TIMEOUT must be positive")
