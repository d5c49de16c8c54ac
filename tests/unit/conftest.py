from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pytest

from elementquery.core.by import By
from elementquery.core.errors import ProtocolError
from elementquery.core.session import QueryConfig, QuerySession


@dataclass(eq=False)
class Node:
    """In-memory element. Tests mutate fields between polls."""

    name: str
    tag: str = "div"
    text: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    props: dict[str, Any] = field(default_factory=dict)
    css: dict[str, str] = field(default_factory=dict)
    enabled: bool = True
    displayed: bool = True
    selected: bool = False
    present: bool = True
    broken: bool = False  # every state read raises ProtocolError
    children: dict[str, list["Node"]] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<{self.tag} {self.name}>"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0
        self.sleeps: list[int] = []
        self.on_sleep: list[Callable[[int], None]] = []

    def now_ms(self) -> int:
        return self.now

    async def sleep_ms(self, ms: int) -> None:
        self.sleeps.append(ms)
        self.now += ms
        for cb in list(self.on_sleep):
            cb(self.now)


class FakeDriver:
    """WebDriver double keyed by `str(By)`, recording every call."""

    def __init__(self, clock: Optional[FakeClock] = None, find_cost_ms: int = 0) -> None:
        self.dom: dict[str, list[Node]] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.released: list[Node] = []
        self.clock = clock
        self.find_cost_ms = find_cost_ms

    def add(self, by: By, *nodes: Node) -> None:
        self.dom.setdefault(str(by), []).extend(nodes)

    def _lookup(self, by: By, scope: Optional[Node]) -> list[Node]:
        key = str(by)
        self.calls.append(("find", key))
        if self.clock is not None:
            self.clock.now += self.find_cost_ms
        if key in self.failing:
            raise ProtocolError(f"lookup failed for {key}")
        source = scope.children if scope is not None else self.dom
        return [n for n in source.get(key, []) if n.present]

    def _read(self, node: Node, what: str) -> Node:
        self.calls.append((what, node.name))
        if node.broken:
            raise ProtocolError(f"{what} failed on {node.name}")
        return node

    async def find_elements(self, by: By, scope: Optional[Node] = None) -> list[Node]:
        return self._lookup(by, scope)

    async def find_element(self, by: By, scope: Optional[Node] = None) -> Optional[Node]:
        self.calls.append(("find_one", str(by)))
        found = self._lookup(by, scope)
        return found[0] if found else None

    async def text(self, handle: Node) -> str:
        return self._read(handle, "text").text

    async def get_attribute(self, handle: Node, name: str) -> Optional[str]:
        return self._read(handle, "attribute").attrs.get(name)

    async def get_property(self, handle: Node, name: str) -> Any:
        return self._read(handle, "property").props.get(name)

    async def get_css_property(self, handle: Node, name: str) -> str:
        return self._read(handle, "css").css.get(name, "")

    async def tag_name(self, handle: Node) -> str:
        return self._read(handle, "tag").tag

    async def has_class(self, handle: Node, name: str) -> bool:
        return name in self._read(handle, "has_class").attrs.get("class", "").split()

    async def is_enabled(self, handle: Node) -> bool:
        return self._read(handle, "enabled").enabled

    async def is_displayed(self, handle: Node) -> bool:
        return self._read(handle, "displayed").displayed

    async def is_selected(self, handle: Node) -> bool:
        return self._read(handle, "selected").selected

    async def is_clickable(self, handle: Node) -> bool:
        node = self._read(handle, "clickable")
        return node.displayed and node.enabled

    async def is_present(self, handle: Node) -> bool:
        return self._read(handle, "present").present

    async def release(self, handles: list[Node]) -> None:
        self.released.extend(handles)

    def reads(self, what: str) -> list[str]:
        return [name for kind, name in self.calls if kind == what]


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    c = FakeClock()
    monkeypatch.setattr("elementquery.utils.timing.now_ms", c.now_ms)
    monkeypatch.setattr("elementquery.core.poller.async_sleep_ms", c.sleep_ms)
    return c


@pytest.fixture
def driver(clock) -> FakeDriver:
    return FakeDriver(clock)


@pytest.fixture
def session(driver) -> QuerySession:
    return QuerySession(driver, QueryConfig())
