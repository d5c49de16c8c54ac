# elementquery/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from elementquery.core.poller import ElementPoller


# ---------- Enums ----------

class PollerKind(str, Enum):
    no_wait = "no_wait"
    timeout = "timeout"
    num_tries = "num_tries"
    timeout_min_tries = "timeout_min_tries"


class ErrorPolicy(str, Enum):
    """What a ProtocolError raised inside one poll cycle does to that cycle."""

    skip = "skip"  # disqualify the failing alternative, keep trying the rest
    abort_cycle = "abort_cycle"  # give up on this cycle, keep polling
    raise_ = "raise"  # propagate immediately


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Central configuration for elementquery.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in the working directory
      3) Defaults below

    Only session defaults live here; every query and waiter can override
    its poller and error policy per call.
    """

    # ---- Polling defaults ----
    ELEMENT_POLLER: PollerKind = Field(default=PollerKind.no_wait, description="Default poller kind")
    POLL_TIMEOUT_MS: int = Field(default=20000, ge=0)
    POLL_INTERVAL_MS: int = Field(default=500, ge=1)
    POLL_TRIES: int = Field(default=3, ge=1, description="Max tries (num_tries) or min tries (timeout_min_tries)")

    # ---- Error handling ----
    QUERY_ERROR_POLICY: ErrorPolicy = Field(default=ErrorPolicy.skip)
    WAIT_IGNORE_ERRORS: bool = Field(default=True, description="Built-in wait conditions treat errors as 'not yet'")

    # ---- Declarative queries ----
    QUERIES_DIR: Path = Field(default=Path("./queries"))

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.WARNING)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./elementquery.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore unknown envs to keep things flexible
    )

    @field_validator("QUERIES_DIR", "LOG_FILE", mode="before")
    @classmethod
    def _coerce_to_path(cls, v):
        if isinstance(v, Path):
            return v
        return Path(str(v)) if v is not None else v

    @field_validator("QUERIES_DIR", "LOG_FILE", mode="after")
    @classmethod
    def _absolutize(cls, v: Path):
        return v if v.is_absolute() else Path.cwd() / v

    def default_poller(self) -> "ElementPoller":
        """Build the ElementPoller described by the polling fields."""
        from elementquery.core.poller import ElementPoller  # local import to avoid circulars

        if self.ELEMENT_POLLER == PollerKind.timeout:
            return ElementPoller.timeout_with_interval(self.POLL_TIMEOUT_MS, self.POLL_INTERVAL_MS)
        if self.ELEMENT_POLLER == PollerKind.num_tries:
            return ElementPoller.num_tries_with_interval(self.POLL_TRIES, self.POLL_INTERVAL_MS)
        if self.ELEMENT_POLLER == PollerKind.timeout_min_tries:
            return ElementPoller.timeout_with_interval_and_min_tries(
                self.POLL_TIMEOUT_MS, self.POLL_INTERVAL_MS, self.POLL_TRIES
            )
        return ElementPoller.no_wait()


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    return Settings()
