# elementquery/core/driver.py
"""Capability protocol consumed from the browser automation client.

The query engine never talks to a browser directly. It asks a `WebDriver`
to locate elements and to read element state, and treats element handles as
opaque values. Implementations live in `elementquery.drivers`; tests use an
in-memory fake.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from elementquery.core.by import By

ElementHandle = Any


class WebDriver(Protocol):
    """Read-only view of a browser session.

    Every method is a coroutine. Implementations must raise
    `elementquery.core.errors.ProtocolError` for client failures and must
    return empty results (not raise) when a selector simply matches nothing.
    """

    async def find_elements(self, by: By, scope: Optional[ElementHandle] = None) -> list[ElementHandle]:
        """Locate all elements matching `by`, in document order.

        Args:
            by: Selector expression.
            scope: Handle to search under, or None for the whole document.
        """
        ...

    async def find_element(self, by: By, scope: Optional[ElementHandle] = None) -> Optional[ElementHandle]:
        """Locate the first element matching `by`, or None."""
        ...

    async def text(self, handle: ElementHandle) -> str:
        ...

    async def get_attribute(self, handle: ElementHandle, name: str) -> Optional[str]:
        ...

    async def get_property(self, handle: ElementHandle, name: str) -> Any:
        ...

    async def get_css_property(self, handle: ElementHandle, name: str) -> str:
        ...

    async def tag_name(self, handle: ElementHandle) -> str:
        ...

    async def has_class(self, handle: ElementHandle, name: str) -> bool:
        ...

    async def is_enabled(self, handle: ElementHandle) -> bool:
        ...

    async def is_displayed(self, handle: ElementHandle) -> bool:
        ...

    async def is_selected(self, handle: ElementHandle) -> bool:
        ...

    async def is_clickable(self, handle: ElementHandle) -> bool:
        """Displayed and enabled."""
        ...

    async def is_present(self, handle: ElementHandle) -> bool:
        """False once the element has been detached from the document."""
        ...

    async def release(self, handles: list[ElementHandle]) -> None:
        """Free client-side resources held by handles the engine discarded.

        Called with candidates that failed their filters. Must not raise;
        clients without per-handle resources can make this a no-op.
        """
        ...
