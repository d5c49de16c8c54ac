# elementquery/core/conditions.py
from __future__ import annotations

"""Element predicates
---------------------
A `Predicate` is a named async test over one `WebElement`. Queries use them
as filters (AND within one alternative); waiters poll them until they hold.

Errors: by default a ProtocolError raised while reading element state leaves
the predicate and the caller's ErrorPolicy decides what happens. With
`ignore_errors=True` the error is logged and the predicate is simply False,
including for negated predicates.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Sequence

from elementquery.core.errors import ProtocolError
from elementquery.core.matching import Needle, as_needle, matches
from elementquery.utils.logger import get_logger

if TYPE_CHECKING:
    from elementquery.core.session import WebElement

ElementTest = Callable[["WebElement"], Awaitable[bool]]
AttributePairs = Iterable[tuple[str, Any]]

log = get_logger(__name__)


@dataclass(frozen=True)
class Predicate:
    description: str
    test: ElementTest
    ignore_errors: bool = False

    async def __call__(self, element: "WebElement") -> bool:
        try:
            return bool(await self.test(element))
        except ProtocolError as e:
            if not self.ignore_errors:
                raise
            log.debug(f"Ignoring error in '{self.description}': {e!r}")
            return False

    def negate(self) -> "Predicate":
        test = self.test

        async def _not(element: "WebElement") -> bool:
            return not await test(element)

        return Predicate(f"not {self.description}", _not, self.ignore_errors)

    __invert__ = negate

    def ignoring_errors(self, ignore: bool = True) -> "Predicate":
        return replace(self, ignore_errors=ignore)

    def __str__(self) -> str:
        return self.description


def as_predicate(value: "Predicate | ElementTest", description: str | None = None) -> Predicate:
    """Wrap a bare async callable into a Predicate (propagating errors)."""
    if isinstance(value, Predicate):
        return value
    return Predicate(description or getattr(value, "__name__", "custom condition"), value)


def all_of(*predicates: Predicate, ignore_errors: bool = False) -> Predicate:
    """AND of several predicates; stops at the first one that fails."""
    preds: Sequence[Predicate] = tuple(predicates)

    async def _all(element: "WebElement") -> bool:
        for p in preds:
            if not await p(element):
                return False
        return True

    return Predicate(" and ".join(p.description for p in preds) or "always", _all, ignore_errors)


# ---------- State ----------

def element_is_displayed(ignore_errors: bool = False) -> Predicate:
    async def _test(el: "WebElement") -> bool:
        return await el.is_displayed()
    return Predicate("displayed", _test, ignore_errors)


def element_is_not_displayed(ignore_errors: bool = False) -> Predicate:
    return element_is_displayed(ignore_errors).negate()


def element_is_enabled(ignore_errors: bool = False) -> Predicate:
    async def _test(el: "WebElement") -> bool:
        return await el.is_enabled()
    return Predicate("enabled", _test, ignore_errors)


def element_is_not_enabled(ignore_errors: bool = False) -> Predicate:
    return element_is_enabled(ignore_errors).negate()


def element_is_selected(ignore_errors: bool = False) -> Predicate:
    async def _test(el: "WebElement") -> bool:
        return await el.is_selected()
    return Predicate("selected", _test, ignore_errors)


def element_is_not_selected(ignore_errors: bool = False) -> Predicate:
    return element_is_selected(ignore_errors).negate()


def element_is_clickable(ignore_errors: bool = False) -> Predicate:
    async def _test(el: "WebElement") -> bool:
        return await el.is_clickable()
    return Predicate("clickable", _test, ignore_errors)


def element_is_not_clickable(ignore_errors: bool = False) -> Predicate:
    return element_is_clickable(ignore_errors).negate()


def element_is_present(ignore_errors: bool = False) -> Predicate:
    async def _test(el: "WebElement") -> bool:
        return await el.is_present()
    return Predicate("present", _test, ignore_errors)


def element_is_stale(ignore_errors: bool = False) -> Predicate:
    async def _test(el: "WebElement") -> bool:
        return not await el.is_present()
    return Predicate("stale", _test, ignore_errors)


# ---------- Content ----------

def _value_matches(label: str, read: Callable[["WebElement"], Awaitable[Any]], value: Any,
                   ignore_errors: bool) -> Predicate:
    needle: Needle = as_needle(value)

    async def _test(el: "WebElement") -> bool:
        return matches(needle, await read(el))

    return Predicate(f"{label} {needle}", _test, ignore_errors)


def element_has_text(text: Any, ignore_errors: bool = False) -> Predicate:
    return _value_matches("text", lambda el: el.text(), text, ignore_errors)


def element_has_id(id_: Any, ignore_errors: bool = False) -> Predicate:
    return _value_matches("id", lambda el: el.id(), id_, ignore_errors)


def element_has_tag(tag_name: Any, ignore_errors: bool = False) -> Predicate:
    return _value_matches("tag", lambda el: el.tag_name(), tag_name, ignore_errors)


def element_has_value(value: Any, ignore_errors: bool = False) -> Predicate:
    return _value_matches("value", lambda el: el.value(), value, ignore_errors)


def element_has_class(class_name: Any, ignore_errors: bool = False) -> Predicate:
    """
    A plain string is a single class token (classList semantics); any other
    needle is matched against each token of the class attribute.
    """
    if isinstance(class_name, str):
        async def _has(el: "WebElement") -> bool:
            return await el.has_class(class_name)
        return Predicate(f"class {class_name!r}", _has, ignore_errors)

    needle = as_needle(class_name)

    async def _any_token(el: "WebElement") -> bool:
        tokens = ((await el.class_name()) or "").split()
        return any(needle.is_match(t) for t in tokens)

    return Predicate(f"class {needle}", _any_token, ignore_errors)


def element_has_not_class(class_name: Any, ignore_errors: bool = False) -> Predicate:
    return element_has_class(class_name, ignore_errors).negate()


def element_has_not_text(text: Any, ignore_errors: bool = False) -> Predicate:
    return element_has_text(text, ignore_errors).negate()


# ---------- Attributes / properties / CSS ----------

def _reader(kind: str, name: str) -> Callable[["WebElement"], Awaitable[Any]]:
    if kind == "attribute":
        return lambda el: el.get_attribute(name)
    if kind == "property":
        return lambda el: el.get_property(name)
    return lambda el: el.get_css_property(name)


def _has_named(kind: str, name: str, value: Any, ignore_errors: bool) -> Predicate:
    return _value_matches(f"{kind} {name!r} =", _reader(kind, name), value, ignore_errors)


def _has_all_named(kind: str, pairs: AttributePairs, ignore_errors: bool) -> Predicate:
    checks = [(_reader(kind, n), as_needle(v), n) for n, v in pairs]

    async def _test(el: "WebElement") -> bool:
        for read, needle, _ in checks:
            if not matches(needle, await read(el)):
                return False
        return True

    desc = ", ".join(f"{n!r}={needle}" for _, needle, n in checks)
    return Predicate(f"{kind}s {desc}", _test, ignore_errors)


def _has_none_named(kind: str, pairs: AttributePairs, ignore_errors: bool) -> Predicate:
    checks = [(_reader(kind, n), as_needle(v), n) for n, v in pairs]

    async def _test(el: "WebElement") -> bool:
        for read, needle, _ in checks:
            if matches(needle, await read(el)):
                return False
        return True

    desc = ", ".join(f"{n!r}={needle}" for _, needle, n in checks)
    return Predicate(f"none of {kind}s {desc}", _test, ignore_errors)


def element_has_attribute(name: str, value: Any, ignore_errors: bool = False) -> Predicate:
    return _has_named("attribute", name, value, ignore_errors)


def element_has_not_attribute(name: str, value: Any, ignore_errors: bool = False) -> Predicate:
    return _has_named("attribute", name, value, ignore_errors).negate()


def element_has_attributes(pairs: AttributePairs, ignore_errors: bool = False) -> Predicate:
    return _has_all_named("attribute", pairs, ignore_errors)


def element_has_not_attributes(pairs: AttributePairs, ignore_errors: bool = False) -> Predicate:
    return _has_none_named("attribute", pairs, ignore_errors)


def element_has_property(name: str, value: Any, ignore_errors: bool = False) -> Predicate:
    return _has_named("property", name, value, ignore_errors)


def element_has_not_property(name: str, value: Any, ignore_errors: bool = False) -> Predicate:
    return _has_named("property", name, value, ignore_errors).negate()


def element_has_properties(pairs: AttributePairs, ignore_errors: bool = False) -> Predicate:
    return _has_all_named("property", pairs, ignore_errors)


def element_has_not_properties(pairs: AttributePairs, ignore_errors: bool = False) -> Predicate:
    return _has_none_named("property", pairs, ignore_errors)


def element_has_css_property(name: str, value: Any, ignore_errors: bool = False) -> Predicate:
    return _has_named("css property", name, value, ignore_errors)


def element_has_not_css_property(name: str, value: Any, ignore_errors: bool = False) -> Predicate:
    return _has_named("css property", name, value, ignore_errors).negate()


def element_has_css_properties(pairs: AttributePairs, ignore_errors: bool = False) -> Predicate:
    return _has_all_named("css property", pairs, ignore_errors)


def element_has_not_css_properties(pairs: AttributePairs, ignore_errors: bool = False) -> Predicate:
    return _has_none_named("css property", pairs, ignore_errors)
