# elementquery/core/poller.py
from __future__ import annotations

"""Pollers and the polling engine
---------------------------------
An `ElementPoller` is an immutable timing policy. `run_poller` drives an
attempt callable against that policy:

    Start -> Attempt -> [value: Done] | [None: Sleep -> Attempt ...] -> Exhausted

Sleeping is an `await`, so any number of polling loops can share one event
loop.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from elementquery.utils.config import PollerKind
from elementquery.utils.logger import get_logger
from elementquery.utils.timing import Stopwatch, async_sleep_ms

T = TypeVar("T")

log = get_logger(__name__)


# ---------- Poller config ----------

class ElementPoller(BaseModel):
    """
    Polling / timeout behaviour for queries and waiters.

    - no_wait: a single attempt.
    - timeout: poll every `interval_ms` until `timeout_ms` has elapsed.
    - num_tries: poll every `interval_ms`, at most `tries` times.
    - timeout_min_tries: poll until `timeout_ms` has elapsed or `tries`
      attempts were made, whichever comes last.

    The interval is the minimum time between the starts of two attempts; if an
    attempt overruns it, the next one starts immediately.
    """

    model_config = ConfigDict(frozen=True)

    kind: PollerKind = Field(default=PollerKind.no_wait)
    timeout_ms: Optional[int] = Field(default=None, ge=0)
    interval_ms: int = Field(default=0, ge=0)
    tries: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_kind_fields(self) -> "ElementPoller":
        if self.kind == PollerKind.no_wait:
            return self
        if self.interval_ms < 1:
            raise ValueError(f"{self.kind.value} poller needs interval_ms >= 1")
        if self.kind in (PollerKind.timeout, PollerKind.timeout_min_tries) and self.timeout_ms is None:
            raise ValueError(f"{self.kind.value} poller needs timeout_ms")
        if self.kind == PollerKind.num_tries and self.tries < 1:
            raise ValueError("num_tries poller needs tries >= 1")
        return self

    # ---------- Constructors ----------

    @classmethod
    def no_wait(cls) -> "ElementPoller":
        return cls(kind=PollerKind.no_wait)

    @classmethod
    def timeout_with_interval(cls, timeout_ms: int, interval_ms: int) -> "ElementPoller":
        return cls(kind=PollerKind.timeout, timeout_ms=timeout_ms, interval_ms=interval_ms)

    @classmethod
    def num_tries_with_interval(cls, tries: int, interval_ms: int) -> "ElementPoller":
        return cls(kind=PollerKind.num_tries, tries=tries, interval_ms=interval_ms)

    @classmethod
    def timeout_with_interval_and_min_tries(cls, timeout_ms: int, interval_ms: int, min_tries: int) -> "ElementPoller":
        return cls(kind=PollerKind.timeout_min_tries, timeout_ms=timeout_ms, interval_ms=interval_ms, tries=min_tries)

    # ---------- Schedule ----------

    def schedule(self) -> tuple[Optional[int], Optional[int], int]:
        """Return (timeout_ms, interval_ms, min_tries) for the engine."""
        if self.kind == PollerKind.timeout:
            return self.timeout_ms, self.interval_ms, 0
        if self.kind == PollerKind.num_tries:
            return None, self.interval_ms, self.tries
        if self.kind == PollerKind.timeout_min_tries:
            return self.timeout_ms, self.interval_ms, self.tries
        return None, None, 0

    def describe(self) -> str:
        if self.kind == PollerKind.timeout:
            return f"timeout {self.timeout_ms} ms every {self.interval_ms} ms"
        if self.kind == PollerKind.num_tries:
            return f"{self.tries} tries every {self.interval_ms} ms"
        if self.kind == PollerKind.timeout_min_tries:
            return f"timeout {self.timeout_ms} ms (min {self.tries} tries) every {self.interval_ms} ms"
        return "no wait"


# ---------- Engine ----------

@dataclass
class PollOutcome(Generic[T]):
    value: Optional[T]
    attempts: int
    elapsed_ms: int

    @property
    def matched(self) -> bool:
        return self.value is not None


async def run_poller(
    poller: ElementPoller,
    attempt: Callable[[int], Awaitable[Optional[T]]],
    description: Optional[str] = None,
) -> PollOutcome[T]:
    """
    Call `attempt(n)` (n = 1, 2, ...) until it returns something other than
    None or the poller is exhausted. At least one attempt always happens.

    Exceptions raised by `attempt` propagate and end the loop.
    """
    timeout, interval, min_tries = poller.schedule()
    desc = f" ({description})" if description else ""
    tries = 0
    sw = Stopwatch().start()

    while True:
        tries += 1
        value = await attempt(tries)
        if value is not None:
            log.debug(f"Matched on attempt {tries}{desc}")
            return PollOutcome(value=value, attempts=tries, elapsed_ms=sw.elapsed_ms())

        elapsed = sw.elapsed_ms()
        if timeout is None and tries >= min_tries:
            break

        # Next attempt is due no earlier than `interval * tries` after the first started
        due = interval * tries if interval else elapsed
        next_start = max(due, elapsed)
        if timeout is not None and next_start >= timeout and tries >= min_tries:
            break

        log.debug(f"No match on attempt {tries}{desc}; next attempt in {next_start - elapsed} ms")
        if next_start > elapsed:
            await async_sleep_ms(next_start - elapsed)

    log.debug(f"Poller exhausted after {tries} attempt(s) [{poller.describe()}]{desc}")
    return PollOutcome(value=None, attempts=tries, elapsed_ms=sw.elapsed_ms())


__all__ = ["ElementPoller", "PollOutcome", "run_poller"]
