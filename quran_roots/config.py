"""Runtime settings, read from the environment (and a ``.env`` file)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_DB_PATH    = "data/quran_roots.sqlite"
DEFAULT_INDEX_PATH = "data/word_index.json"
DEFAULT_BATCH_SIZE = 50       # verse keys per OR-of-AND query
DEFAULT_CACHE_TTL  = 3600     # seconds
DEFAULT_DB_TIMEOUT = 5        # seconds the store may stay busy
DEFAULT_LOG_LEVEL  = "INFO"

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    index_path: str = DEFAULT_INDEX_PATH
    batch_size: int = DEFAULT_BATCH_SIZE
    cache_ttl: int = DEFAULT_CACHE_TTL
    db_timeout: int = DEFAULT_DB_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from ``QURAN_ROOTS_*`` variables.

        A ``.env`` file in the working directory is loaded first unless
        *dotenv* is false; variables already set in the process win.
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        batch_size = _env_int("QURAN_ROOTS_BATCH_SIZE", DEFAULT_BATCH_SIZE)
        if batch_size < 1:
            raise ValueError(f"QURAN_ROOTS_BATCH_SIZE must be >= 1, got {batch_size}")
        return cls(
            db_path=os.environ.get("QURAN_ROOTS_DB") or DEFAULT_DB_PATH,
            index_path=os.environ.get("QURAN_ROOTS_INDEX") or DEFAULT_INDEX_PATH,
            batch_size=batch_size,
            cache_ttl=_env_int("QURAN_ROOTS_CACHE_TTL", DEFAULT_CACHE_TTL),
            db_timeout=_env_int("QURAN_ROOTS_DB_TIMEOUT", DEFAULT_DB_TIMEOUT),
            log_level=(os.environ.get("QURAN_ROOTS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Console logging for the command-line entry points."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format=LOG_FORMAT)
