# elementquery/core/waiter.py
from __future__ import annotations

"""Element waiters
------------------
Poll one already-resolved element until it satisfies every supplied
condition:

    await elem.wait("button never became clickable").until().clickable()
    await elem.wait().until().conditions([element_is_displayed(), element_has_text("Done")])

Success returns None; exhaustion raises WaitTimeout with the diagnostic
message (or the last ProtocolError, see ErrorPolicy).
"""

from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence

from elementquery.core import conditions
from elementquery.core.conditions import AttributePairs, ElementTest, Predicate, as_predicate
from elementquery.core.errors import ProtocolError, WaitTimeout
from elementquery.core.poller import ElementPoller, run_poller
from elementquery.utils.config import ErrorPolicy
from elementquery.utils.logger import get_logger
from elementquery.utils.timing import measure

if TYPE_CHECKING:
    from elementquery.core.session import WebElement

log = get_logger(__name__)


class ElementWaiter:
    def __init__(
        self,
        element: "WebElement",
        poller: ElementPoller,
        message: str = "",
        error_policy: Optional[ErrorPolicy] = None,
    ) -> None:
        self.element = element
        self.poller = poller
        self.message = message
        self.error_policy = error_policy or element.session.config.error_policy

    def with_poller(self, poller: ElementPoller) -> "ElementWaiter":
        """Use `poller` for this wait only; the session default is untouched."""
        self.poller = poller
        return self

    def wait(self, timeout_ms: int, interval_ms: int) -> "ElementWaiter":
        return self.with_poller(ElementPoller.timeout_with_interval(timeout_ms, interval_ms))

    def nowait(self) -> "ElementWaiter":
        return self.with_poller(ElementPoller.no_wait())

    def with_error_policy(self, policy: ErrorPolicy) -> "ElementWaiter":
        self.error_policy = policy
        return self

    def until(self) -> "ElementWaitCondition":
        return ElementWaitCondition(self)

    async def run_poller(self, predicates: Sequence[Predicate], message: str) -> None:
        description = " and ".join(p.description for p in predicates)
        last_error: Optional[ProtocolError] = None

        async def _attempt(n: int) -> Optional[bool]:
            nonlocal last_error
            try:
                for predicate in predicates:
                    if not await predicate(self.element):
                        last_error = None
                        return None
            except ProtocolError as e:
                if self.error_policy == ErrorPolicy.raise_:
                    raise
                log.debug(f"Attempt {n} errored while checking {description}: {e!r}")
                last_error = e
                return None
            last_error = None
            return True

        outcome = await run_poller(self.poller, _attempt, description=f"{self.element!r}: {description}")
        if outcome.matched:
            return
        if last_error is not None:
            raise last_error
        raise WaitTimeout(message, outcome.attempts)


class ElementWaitCondition:
    """Terminal conditions for an ElementWaiter."""

    def __init__(self, waiter: ElementWaiter) -> None:
        self.waiter = waiter
        self._ignore_errors = waiter.element.session.config.wait_ignore_errors

    def ignore_errors(self, ignore: bool) -> "ElementWaitCondition":
        """
        Whether the built-in conditions treat driver errors as "not yet".
        When off, errors are handled by the waiter's ErrorPolicy instead.
        """
        self._ignore_errors = ignore
        return self

    @measure("ElementWaitCondition.conditions")
    async def conditions(self, predicates: Iterable[Predicate | ElementTest], message: Optional[str] = None) -> None:
        """Wait until every predicate holds in the same poll cycle."""
        preds = [as_predicate(p) for p in predicates]
        if not preds:
            raise ValueError("conditions() needs at least one predicate")
        await self.waiter.run_poller(preds, self.waiter.message if message is None else message)

    async def condition(self, predicate: Predicate | ElementTest, message: Optional[str] = None) -> None:
        await self.conditions([predicate], message)

    # ---------- State ----------

    async def stale(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_stale(self._ignore_errors), message)

    async def displayed(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_displayed(self._ignore_errors), message)

    async def not_displayed(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_not_displayed(self._ignore_errors), message)

    async def selected(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_selected(self._ignore_errors), message)

    async def not_selected(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_not_selected(self._ignore_errors), message)

    async def enabled(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_enabled(self._ignore_errors), message)

    async def not_enabled(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_not_enabled(self._ignore_errors), message)

    async def clickable(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_clickable(self._ignore_errors), message)

    async def not_clickable(self, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_is_not_clickable(self._ignore_errors), message)

    # ---------- Content ----------

    async def has_text(self, text: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_text(text, self._ignore_errors), message)

    async def has_not_text(self, text: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_text(text, self._ignore_errors), message)

    async def has_class(self, class_name: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_class(class_name, self._ignore_errors), message)

    async def has_not_class(self, class_name: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_class(class_name, self._ignore_errors), message)

    async def has_value(self, value: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_value(value, self._ignore_errors), message)

    # ---------- Attributes ----------

    async def has_attribute(self, name: str, value: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_attribute(name, value, self._ignore_errors), message)

    async def has_not_attribute(self, name: str, value: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_attribute(name, value, self._ignore_errors), message)

    async def has_attributes(self, pairs: AttributePairs, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_attributes(pairs, self._ignore_errors), message)

    async def has_not_attributes(self, pairs: AttributePairs, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_attributes(pairs, self._ignore_errors), message)

    # ---------- Properties ----------

    async def has_property(self, name: str, value: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_property(name, value, self._ignore_errors), message)

    async def has_not_property(self, name: str, value: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_property(name, value, self._ignore_errors), message)

    async def has_properties(self, pairs: AttributePairs, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_properties(pairs, self._ignore_errors), message)

    async def has_not_properties(self, pairs: AttributePairs, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_properties(pairs, self._ignore_errors), message)

    # ---------- CSS ----------

    async def has_css_property(self, name: str, value: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_css_property(name, value, self._ignore_errors), message)

    async def has_not_css_property(self, name: str, value: Any, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_css_property(name, value, self._ignore_errors), message)

    async def has_css_properties(self, pairs: AttributePairs, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_css_properties(pairs, self._ignore_errors), message)

    async def has_not_css_properties(self, pairs: AttributePairs, message: Optional[str] = None) -> None:
        await self.condition(conditions.element_has_not_css_properties(pairs, self._ignore_errors), message)
