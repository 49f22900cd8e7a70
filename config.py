"""Runtime configuration read from the process environment.

A `.env` file next to the working directory is loaded first, so local
development can keep credentials out of the shell profile.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MAX_IMAGE_BYTES = 4 * 1024 * 1024


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.error("Ignoring non-numeric %s=%r; using %s", name, raw, default)
        return default


def _int_env(name: str, default: int) -> int:
    return int(_float_env(name, default))


@dataclass
class Settings:
    """Application settings.

    Attributes:
        openai_api_key: Credential for the remote analyzer. A missing key is
            logged, not fatal; analysis calls will fail until it is set.
        openai_model: Model name sent with every analysis request.
        database_dir: Directory holding the SQLite key-value file.
        account_latency_seconds: Simulated delay awaited by account operations.
        max_image_bytes: Per-file upload limit for analysis images.
        reset_code_ttl_minutes: Lifetime of a password reset code.
    """

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-5"
    database_dir: Optional[str] = None
    account_latency_seconds: float = 0.5
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    reset_code_ttl_minutes: int = 15

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            logging.error("OPENAI_API_KEY environment variable not set.")
        return cls(
            openai_api_key=api_key or None,
            openai_model=os.getenv("OPENAI_MODEL") or "gpt-5",
            database_dir=os.getenv("DATABASE_DIR") or None,
            account_latency_seconds=_float_env("ACCOUNT_LATENCY_SECONDS", 0.5),
            max_image_bytes=_int_env("MAX_IMAGE_BYTES", DEFAULT_MAX_IMAGE_BYTES),
            reset_code_ttl_minutes=_int_env("RESET_CODE_TTL_MINUTES", 15),
        )
