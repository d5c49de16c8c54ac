import re

import pytest

from elementquery.core.conditions import element_is_clickable, element_is_displayed
from elementquery.core.errors import ProtocolError, WaitTimeout
from elementquery.core.matching import StringMatch
from elementquery.core.poller import ElementPoller
from elementquery.core.session import QueryConfig, QuerySession
from elementquery.utils.config import ErrorPolicy

from .conftest import Node

THREE_TRIES = ElementPoller.num_tries_with_interval(3, 100)


@pytest.mark.asyncio
async def test_all_conditions_must_hold_in_the_same_cycle(session, clock):
    node = Node("btn", displayed=True, enabled=False)
    states = iter([(False, True), (True, True)])

    def step(now):
        node.displayed, node.enabled = next(states)

    clock.on_sleep.append(step)
    elem = session.element(node)

    await elem.wait().wait(5000, 100).until().conditions([element_is_displayed(), element_is_clickable()])

    # cycle 1: displayed only, cycle 2: enabled only, cycle 3: both
    assert clock.sleeps == [100, 100]


@pytest.mark.asyncio
async def test_timeout_carries_the_waiter_message(session, clock):
    elem = session.element(Node("hidden", displayed=False))

    with pytest.raises(WaitTimeout) as ei:
        await elem.wait("panel never showed").with_poller(THREE_TRIES).until().displayed()

    assert str(ei.value) == "panel never showed"
    assert ei.value.attempts == 3
    assert isinstance(ei.value, TimeoutError)


@pytest.mark.asyncio
async def test_per_condition_message_overrides_waiter_message(session, clock):
    elem = session.element(Node("hidden", displayed=False))

    with pytest.raises(WaitTimeout, match="still hidden"):
        await elem.wait("outer").until().displayed("still hidden")

    with pytest.raises(WaitTimeout, match="Timed out waiting for element condition"):
        await elem.wait().until().displayed()


@pytest.mark.asyncio
async def test_stale_waits_for_detachment(session, clock):
    node = Node("row")
    clock.on_sleep.append(lambda now: setattr(node, "present", False))

    await session.element(node).wait().wait(1000, 50).until().stale()

    assert clock.sleeps == [50]


@pytest.mark.asyncio
async def test_builtin_conditions_ignore_errors_by_default(session, clock):
    elem = session.element(Node("broken", broken=True))

    with pytest.raises(WaitTimeout):
        await elem.wait("gone wrong").with_poller(THREE_TRIES).until().displayed()


@pytest.mark.asyncio
async def test_errors_surface_when_not_ignored(session, clock):
    elem = session.element(Node("broken", broken=True))

    with pytest.raises(ProtocolError):
        await elem.wait().with_poller(THREE_TRIES).until().ignore_errors(False).displayed()
    assert clock.sleeps == [100, 100]


@pytest.mark.asyncio
async def test_raise_policy_stops_the_wait_at_first_error(session, clock):
    elem = session.element(Node("broken", broken=True))
    waiter = elem.wait().with_poller(THREE_TRIES).with_error_policy(ErrorPolicy.raise_)

    with pytest.raises(ProtocolError):
        await waiter.until().ignore_errors(False).enabled()
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_ignore_errors_default_follows_session_config(driver, clock):
    strict = QuerySession(driver, QueryConfig(wait_ignore_errors=False))
    elem = strict.element(Node("broken", broken=True))

    with pytest.raises(ProtocolError):
        await elem.wait().until().displayed()


@pytest.mark.asyncio
async def test_custom_conditions_propagate_errors(session, clock):
    elem = session.element(Node("n"))

    async def flaky(el):
        raise ProtocolError("connection reset")

    with pytest.raises(ProtocolError, match="connection reset"):
        await elem.wait().until().condition(flaky)


@pytest.mark.asyncio
async def test_content_conditions(session, clock):
    node = Node(
        "input",
        tag="input",
        text="Never Gonna Give You Up",
        attrs={"class": "field wide", "type": "text", "name": "q"},
        props={"value": "rick"},
        css={"color": "rgb(0, 0, 0)"},
    )
    until = session.element(node).wait().until()

    await until.has_text(StringMatch("gonna give").partial().case_insensitive())
    await until.has_text(re.compile(r"^Never"))
    await until.has_not_text("Together Forever")
    await until.has_class("wide")
    await until.has_not_class("narrow")
    await until.has_value("rick")
    await until.has_attribute("type", "text")
    await until.has_attributes([("type", "text"), ("name", "q")])
    await until.has_not_attributes([("type", "password"), ("name", "p")])
    await until.has_property("value", "rick")
    await until.has_css_property("color", "rgb(0, 0, 0)")

    with pytest.raises(WaitTimeout):
        await until.has_not_attributes([("type", "password"), ("name", "q")])


@pytest.mark.asyncio
async def test_empty_condition_list_is_rejected(session):
    with pytest.raises(ValueError):
        await session.element(Node("n")).wait().until().conditions([])
