"""
elementquery
------------
Polling element queries and condition waits for async browser automation.

    from elementquery import By, ElementPoller, QuerySession
    from elementquery.drivers.playwright import PlaywrightDriver

    session = QuerySession(PlaywrightDriver(page))
    session.set_default_poller(ElementPoller.timeout_with_interval(10_000, 500))
    elem = await session.query(By.css("thiswont.match")).or_(By.id("searchInput")).first()
    await elem.wait("search box never became clickable").until().clickable()
"""

from elementquery.core.by import By, SelectorStrategy
from elementquery.core.conditions import (
    Predicate,
    all_of,
    element_has_attribute,
    element_has_attributes,
    element_has_class,
    element_has_css_properties,
    element_has_css_property,
    element_has_id,
    element_has_not_attribute,
    element_has_not_attributes,
    element_has_not_class,
    element_has_not_css_properties,
    element_has_not_css_property,
    element_has_not_properties,
    element_has_not_property,
    element_has_not_text,
    element_has_properties,
    element_has_property,
    element_has_tag,
    element_has_text,
    element_has_value,
    element_is_clickable,
    element_is_displayed,
    element_is_enabled,
    element_is_not_clickable,
    element_is_not_displayed,
    element_is_not_enabled,
    element_is_not_selected,
    element_is_present,
    element_is_selected,
    element_is_stale,
)
from elementquery.core.errors import ElementQueryError, NoSuchElement, ProtocolError, WaitTimeout
from elementquery.core.matching import CallableMatch, RegexMatch, StringMatch
from elementquery.core.poller import ElementPoller
from elementquery.core.query import ElementQuery, ElementSelector
from elementquery.core.session import QueryConfig, QuerySession, WebElement
from elementquery.core.waiter import ElementWaitCondition, ElementWaiter
from elementquery.utils.config import ErrorPolicy, PollerKind

__version__ = "0.1.0"

__all__ = [
    "By",
    "SelectorStrategy",
    "ElementPoller",
    "PollerKind",
    "ErrorPolicy",
    "QueryConfig",
    "QuerySession",
    "WebElement",
    "ElementQuery",
    "ElementSelector",
    "ElementWaiter",
    "ElementWaitCondition",
    "ElementQueryError",
    "NoSuchElement",
    "ProtocolError",
    "WaitTimeout",
    "StringMatch",
    "RegexMatch",
    "CallableMatch",
    "Predicate",
    "all_of",
    "element_has_attribute",
    "element_has_attributes",
    "element_has_class",
    "element_has_css_properties",
    "element_has_css_property",
    "element_has_id",
    "element_has_not_attribute",
    "element_has_not_attributes",
    "element_has_not_class",
    "element_has_not_css_properties",
    "element_has_not_css_property",
    "element_has_not_properties",
    "element_has_not_property",
    "element_has_not_text",
    "element_has_properties",
    "element_has_property",
    "element_has_tag",
    "element_has_text",
    "element_has_value",
    "element_is_clickable",
    "element_is_displayed",
    "element_is_enabled",
    "element_is_not_clickable",
    "element_is_not_displayed",
    "element_is_not_enabled",
    "element_is_not_selected",
    "element_is_present",
    "element_is_selected",
    "element_is_stale",
]
