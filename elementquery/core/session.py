# elementquery/core/session.py
from __future__ import annotations

"""Session context
------------------
`QuerySession` pairs a driver with the session-wide defaults (poller, error
policy). Every query and waiter built from it, or from an element it
returned, starts from those defaults and may override them per call.
"""

from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from elementquery.core.by import By
from elementquery.core.driver import ElementHandle, WebDriver
from elementquery.core.poller import ElementPoller
from elementquery.utils.config import ErrorPolicy, Settings, get_settings

if TYPE_CHECKING:
    from elementquery.core.query import ElementQuery
    from elementquery.core.waiter import ElementWaiter


class QueryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    poller: ElementPoller = Field(default_factory=ElementPoller.no_wait)
    error_policy: ErrorPolicy = Field(default=ErrorPolicy.skip)
    wait_ignore_errors: bool = Field(default=True)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "QueryConfig":
        s = settings or get_settings()
        return cls(
            poller=s.default_poller(),
            error_policy=s.QUERY_ERROR_POLICY,
            wait_ignore_errors=s.WAIT_IGNORE_ERRORS,
        )


class QuerySession:
    """Entry point: wraps a driver and hands out queries and elements."""

    def __init__(self, driver: WebDriver, config: Optional[QueryConfig] = None) -> None:
        self.driver = driver
        self.config = config or QueryConfig.from_settings()

    def get_default_poller(self) -> ElementPoller:
        return self.config.poller

    def set_default_poller(self, poller: ElementPoller) -> None:
        """Change the poller inherited by queries/waiters created from now on."""
        self.config = self.config.model_copy(update={"poller": poller})

    def set_error_policy(self, policy: ErrorPolicy) -> None:
        self.config = self.config.model_copy(update={"error_policy": policy})

    def element(self, handle: ElementHandle) -> "WebElement":
        return WebElement(self, handle)

    def query(self, by: By, within: Optional["WebElement"] = None) -> "ElementQuery":
        """Start a query for `by`, searching the document or under `within`."""
        from elementquery.core.query import ElementQuery  # local import to avoid circulars

        return ElementQuery(self, by, scope=within)

    def wait(self, element: "WebElement", message: str = "") -> "ElementWaiter":
        from elementquery.core.waiter import ElementWaiter  # local import to avoid circulars

        return ElementWaiter(element, self.config.poller, message)


class WebElement:
    """An element handle bound to the session that found it.

    All accessors read live state through the driver; nothing is cached.

    Equality is handle identity within one session. Drivers hand out a fresh
    handle object per lookup, so two lookups of the same DOM node are not
    equal; compare them in the page if that matters.
    """

    def __init__(self, session: QuerySession, handle: ElementHandle) -> None:
        self.session = session
        self.handle = handle

    @property
    def driver(self) -> WebDriver:
        return self.session.driver

    # ---------- State ----------

    async def text(self) -> str:
        return await self.driver.text(self.handle)

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.driver.get_attribute(self.handle, name)

    async def get_property(self, name: str) -> Any:
        return await self.driver.get_property(self.handle, name)

    async def get_css_property(self, name: str) -> str:
        return await self.driver.get_css_property(self.handle, name)

    async def tag_name(self) -> str:
        return await self.driver.tag_name(self.handle)

    async def id(self) -> Optional[str]:
        return await self.get_attribute("id")

    async def class_name(self) -> Optional[str]:
        return await self.get_attribute("class")

    async def value(self) -> Optional[str]:
        v = await self.get_property("value")
        return None if v is None else str(v)

    async def has_class(self, name: str) -> bool:
        return await self.driver.has_class(self.handle, name)

    async def is_enabled(self) -> bool:
        return await self.driver.is_enabled(self.handle)

    async def is_displayed(self) -> bool:
        return await self.driver.is_displayed(self.handle)

    async def is_selected(self) -> bool:
        return await self.driver.is_selected(self.handle)

    async def is_clickable(self) -> bool:
        return await self.driver.is_clickable(self.handle)

    async def is_present(self) -> bool:
        return await self.driver.is_present(self.handle)

    # ---------- Builders ----------

    def query(self, by: By) -> "ElementQuery":
        """Query for descendants of this element."""
        return self.session.query(by, within=self)

    def wait(self, message: str = "") -> "ElementWaiter":
        """Wait for this element to satisfy a condition (see `ElementWaiter.until`)."""
        return self.session.wait(self, message)

    def __eq__(self, other: object) -> bool:
        # Identity only: the same object the driver returned, not the same node
        if not isinstance(other, WebElement):
            return NotImplemented
        return self.session is other.session and self.handle is other.handle

    def __hash__(self) -> int:
        return hash((id(self.session), id(self.handle)))

    def __repr__(self) -> str:
        return f"WebElement({self.handle!r})"
