# elementquery/core/errors.py
"""Exception hierarchy for elementquery."""

from __future__ import annotations

from typing import Sequence

from elementquery.core.by import By, selector_summary


class ElementQueryError(RuntimeError):
    """Base exception for all elementquery errors."""


class ProtocolError(ElementQueryError):
    """The underlying browser client failed to answer a query.

    Drivers raise this with the client's own exception chained as __cause__.
    """


class NoSuchElement(ElementQueryError):  # noqa: N818
    """No alternative of a query produced a matching element before the poller gave up."""

    def __init__(self, selectors: Sequence[By], attempts: int = 0) -> None:
        self.selectors = tuple(selectors)
        self.attempts = attempts
        super().__init__(
            f"Element(s) not found using selectors: {selector_summary(self.selectors)}"
        )


class WaitTimeout(ElementQueryError, TimeoutError):  # noqa: N818
    """An element did not satisfy the awaited condition(s) in time."""

    def __init__(self, message: str, attempts: int = 0) -> None:
        self.message = message
        self.attempts = attempts
        super().__init__(message or "Timed out waiting for element condition")
