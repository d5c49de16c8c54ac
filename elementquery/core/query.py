# elementquery/core/query.py
from __future__ import annotations

"""Element queries
------------------
`ElementQuery` is a fluent builder over an ordered list of `ElementSelector`
alternatives:

    await session.query(By.css("thiswont.match")).with_text("testing") \\
        .or_(By.id("searchInput")).with_class("search").and_not_enabled() \\
        .first()

Each poll cycle tries the alternatives in declaration order; the first one
that yields at least one element passing all of its filters wins the cycle.
Filters always attach to the most recently added alternative.
"""

from typing import TYPE_CHECKING, Any, Iterable, Optional

from elementquery.core.by import By, selector_summary
from elementquery.core import conditions
from elementquery.core.conditions import ElementTest, Predicate, as_predicate
from elementquery.core.errors import NoSuchElement, ProtocolError
from elementquery.core.poller import ElementPoller, run_poller
from elementquery.utils.config import ErrorPolicy
from elementquery.utils.logger import get_logger, log_with_context
from elementquery.utils.timing import measure

if TYPE_CHECKING:
    from elementquery.core.session import QuerySession, WebElement

log = get_logger(__name__)


class ElementSelector:
    """
    One query alternative: a selector plus zero or more filters.
    An element returned by the selector matches only if every filter passes.
    """

    def __init__(self, by: By) -> None:
        self.by = by
        self.single = False
        self.filters: list[Predicate] = []

    def set_single(self) -> None:
        """Use the driver's single-element lookup instead of find_elements."""
        self.single = True

    def add_filter(self, predicate: Predicate) -> None:
        self.filters.append(predicate)

    async def run_filters(
        self, elements: list["WebElement"], errors: Optional[list[ProtocolError]] = None
    ) -> list["WebElement"]:
        """
        Keep the elements passing every filter. When `errors` is given, an
        element whose filter raises is dropped and the error appended to it;
        otherwise the error propagates.
        """
        kept: list["WebElement"] = []
        for element in elements:
            try:
                for predicate in self.filters:
                    if not await predicate(element):
                        break
                else:
                    kept.append(element)
            except ProtocolError as e:
                if errors is None:
                    raise
                log.debug(f"Dropping {element!r} from {self.by}: {e!r}")
                errors.append(e)
        return kept

    async def evaluate_all(
        self,
        session: "QuerySession",
        scope: Optional["WebElement"] = None,
        errors: Optional[list[ProtocolError]] = None,
    ) -> list["WebElement"]:
        """Locate candidates for this alternative and keep those passing all filters."""
        root = scope.handle if scope is not None else None
        if self.single:
            handle = await session.driver.find_element(self.by, root)
            handles = [] if handle is None else [handle]
        else:
            handles = await session.driver.find_elements(self.by, root)

        if not handles:
            return []
        elements = [session.element(h) for h in handles]
        kept = await self.run_filters(elements, errors)
        dropped = [el.handle for el in elements if el not in kept]
        if dropped:
            await session.driver.release(dropped)
        return kept

    def describe(self) -> str:
        if not self.filters:
            return str(self.by)
        return f"{self.by} where " + " and ".join(p.description for p in self.filters)


class ElementQuery:
    """High-level interface for polling element queries using a builder pattern."""

    def __init__(
        self,
        session: "QuerySession",
        by: By,
        *,
        scope: Optional["WebElement"] = None,
        poller: Optional[ElementPoller] = None,
        error_policy: Optional[ErrorPolicy] = None,
    ) -> None:
        self.session = session
        self.scope = scope
        self.poller = poller or session.config.poller
        self.error_policy = error_policy or session.config.error_policy
        self.selectors: list[ElementSelector] = [ElementSelector(by)]

    # ---------- Polling options ----------

    def with_poller(self, poller: ElementPoller) -> "ElementQuery":
        """Use `poller` for this query only; the session default is untouched."""
        self.poller = poller
        return self

    def wait(self, timeout_ms: int, interval_ms: int) -> "ElementQuery":
        return self.with_poller(ElementPoller.timeout_with_interval(timeout_ms, interval_ms))

    def nowait(self) -> "ElementQuery":
        return self.with_poller(ElementPoller.no_wait())

    def with_error_policy(self, policy: ErrorPolicy) -> "ElementQuery":
        self.error_policy = policy
        return self

    # ---------- Alternatives ----------

    def or_(self, by: By) -> "ElementQuery":
        """
        Add another selector. Filters added after this call (until the next
        `or_()`) apply to this selector only.
        """
        self.selectors.append(ElementSelector(by))
        return self

    def with_single_selector(self) -> "ElementQuery":
        """
        Make the latest selector use find_element rather than find_elements.
        Faster, but filters then only ever see the first candidate.
        """
        self.selectors[-1].set_single()
        return self

    # ---------- Filters ----------

    def with_filter(self, predicate: Predicate | ElementTest, description: Optional[str] = None) -> "ElementQuery":
        self.selectors[-1].add_filter(as_predicate(predicate, description))
        return self

    def and_enabled(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_enabled())

    def and_not_enabled(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_enabled())

    def and_selected(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_selected())

    def and_not_selected(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_selected())

    def and_displayed(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_displayed())

    def and_not_displayed(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_displayed())

    def and_clickable(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_clickable())

    def and_not_clickable(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_clickable())

    def with_text(self, text: Any) -> "ElementQuery":
        """Only match elements whose text matches `text` (str, regex, StringMatch, callable)."""
        return self.with_filter(conditions.element_has_text(text))

    def with_id(self, id_: Any) -> "ElementQuery":
        return self.with_filter(conditions.element_has_id(id_))

    def with_class(self, class_name: Any) -> "ElementQuery":
        return self.with_filter(conditions.element_has_class(class_name))

    def with_tag(self, tag_name: Any) -> "ElementQuery":
        return self.with_filter(conditions.element_has_tag(tag_name))

    def with_value(self, value: Any) -> "ElementQuery":
        return self.with_filter(conditions.element_has_value(value))

    def with_attribute(self, name: str, value: Any) -> "ElementQuery":
        return self.with_filter(conditions.element_has_attribute(name, value))

    def with_attributes(self, pairs: Iterable[tuple[str, Any]]) -> "ElementQuery":
        return self.with_filter(conditions.element_has_attributes(pairs))

    def with_property(self, name: str, value: Any) -> "ElementQuery":
        return self.with_filter(conditions.element_has_property(name, value))

    def with_properties(self, pairs: Iterable[tuple[str, Any]]) -> "ElementQuery":
        return self.with_filter(conditions.element_has_properties(pairs))

    def with_css_property(self, name: str, value: Any) -> "ElementQuery":
        return self.with_filter(conditions.element_has_css_property(name, value))

    def with_css_properties(self, pairs: Iterable[tuple[str, Any]]) -> "ElementQuery":
        return self.with_filter(conditions.element_has_css_properties(pairs))

    # ---------- Evaluation ----------

    @property
    def selector_exprs(self) -> tuple[By, ...]:
        return tuple(s.by for s in self.selectors)

    def describe(self) -> str:
        return " OR ".join(s.describe() for s in self.selectors)

    async def evaluate_once(self) -> list["WebElement"]:
        """
        Run one poll cycle. Returns the elements of the first alternative that
        matched, or [] if none did.

        A candidate whose filter raises is dropped; its alternative only
        counts as failed when no candidate passed and at least one raised
        (under `raise` the first error propagates as is).

        Raises ProtocolError when the cycle failed because of errors:
        immediately under `raise` and `abort_cycle`, and under `skip` only
        when every alternative raised.
        """
        errors: list[ProtocolError] = []
        for selector in self.selectors:
            element_errors: Optional[list[ProtocolError]] = None if self.error_policy == ErrorPolicy.raise_ else []
            try:
                elements = await selector.evaluate_all(self.session, self.scope, element_errors)
                if not elements and element_errors:
                    raise element_errors[-1]
            except ProtocolError as e:
                if self.error_policy != ErrorPolicy.skip:
                    raise
                log.debug(f"Alternative {selector.by} failed this cycle: {e!r}")
                errors.append(e)
                continue
            if elements:
                return elements

        if errors and len(errors) == len(self.selectors):
            raise errors[-1]
        return []

    async def _poll(self) -> list["WebElement"]:
        qlog = log_with_context(log, selectors=selector_summary(self.selector_exprs))
        last_error: Optional[ProtocolError] = None

        async def _attempt(n: int) -> Optional[list["WebElement"]]:
            nonlocal last_error
            try:
                elements = await self.evaluate_once()
            except ProtocolError as e:
                if self.error_policy == ErrorPolicy.raise_:
                    raise
                qlog.debug(f"Attempt {n} errored: {e!r}")
                last_error = e
                return None
            last_error = None
            return elements or None

        outcome = await run_poller(self.poller, _attempt, description=self.describe())
        if outcome.value:
            return outcome.value
        if last_error is not None:
            # Every recent attempt failed on errors: those are the real answer
            raise last_error
        qlog.debug(f"No match after {outcome.attempts} attempt(s) in {outcome.elapsed_ms} ms")
        raise NoSuchElement(self.selector_exprs, outcome.attempts)

    # ---------- Terminals ----------

    async def exists(self) -> bool:
        """True if any alternative matches right now. Never waits."""
        return bool(await self.evaluate_once())

    @measure("ElementQuery.first")
    async def first(self) -> "WebElement":
        """Return the first element matched by the winning alternative."""
        elements = await self._poll()
        return elements[0]

    @measure("ElementQuery.all")
    async def all(self) -> list["WebElement"]:
        """Return every element matched by the winning alternative (never empty)."""
        return await self._poll()

    def __repr__(self) -> str:
        return f"ElementQuery({self.describe()}; {self.poller.describe()})"
