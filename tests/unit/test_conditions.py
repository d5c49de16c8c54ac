import pytest

from elementquery.core import conditions
from elementquery.core.conditions import Predicate, all_of, as_predicate
from elementquery.core.errors import ProtocolError

from .conftest import Node


@pytest.mark.asyncio
async def test_state_predicates(session):
    el = session.element(Node("n", displayed=False, enabled=True, selected=True))

    assert not await conditions.element_is_displayed()(el)
    assert await conditions.element_is_not_displayed()(el)
    assert await conditions.element_is_enabled()(el)
    assert await conditions.element_is_selected()(el)
    assert not await conditions.element_is_clickable()(el)
    assert await conditions.element_is_present()(el)
    assert not await conditions.element_is_stale()(el)


@pytest.mark.asyncio
async def test_errors_propagate_unless_ignored(session):
    el = session.element(Node("broken", broken=True))

    with pytest.raises(ProtocolError):
        await conditions.element_is_displayed()(el)
    assert await conditions.element_is_displayed(ignore_errors=True)(el) is False


@pytest.mark.asyncio
async def test_negated_predicate_is_false_on_ignored_error(session):
    el = session.element(Node("broken", broken=True))

    assert await conditions.element_is_not_displayed(ignore_errors=True)(el) is False
    assert await (~conditions.element_has_text("x").ignoring_errors())(el) is False


@pytest.mark.asyncio
async def test_class_predicates(session):
    el = session.element(Node("n", attrs={"class": "btn btn-primary"}))

    assert await conditions.element_has_class("btn")(el)
    assert not await conditions.element_has_class("btn-prim")(el)
    assert await conditions.element_has_not_class("disabled")(el)


@pytest.mark.asyncio
async def test_class_predicate_with_needle_checks_each_token(session, driver):
    from elementquery.core.matching import StringMatch

    el = session.element(Node("n", attrs={"class": "btn btn-primary"}))

    assert await conditions.element_has_class(StringMatch("PRIMARY").partial().case_insensitive())(el)
    assert driver.reads("has_class") == []


@pytest.mark.asyncio
async def test_plural_named_predicates(session):
    el = session.element(Node("n", props={"checked": True, "value": "on"}))

    assert await conditions.element_has_properties([("checked", "true"), ("value", "on")])(el)
    assert not await conditions.element_has_properties([("checked", "false"), ("value", "on")])(el)
    # has_not_* plural: none of the pairs may match
    assert not await conditions.element_has_not_properties([("checked", "false"), ("value", "on")])(el)
    assert await conditions.element_has_not_properties([("checked", "false"), ("value", "off")])(el)


@pytest.mark.asyncio
async def test_missing_values_never_match(session):
    el = session.element(Node("n"))

    assert not await conditions.element_has_attribute("href", "/x")(el)
    assert await conditions.element_has_not_attribute("href", "/x")(el)


@pytest.mark.asyncio
async def test_all_of_short_circuits(session, driver):
    el = session.element(Node("n", displayed=False, text="hi"))

    combined = all_of(conditions.element_is_displayed(), conditions.element_has_text("hi"))

    assert not await combined(el)
    assert driver.reads("text") == []
    assert combined.description == "displayed and text 'hi'"


@pytest.mark.asyncio
async def test_as_predicate_wraps_plain_coroutines(session):
    async def is_input(el):
        return await el.tag_name() == "input"

    pred = as_predicate(is_input)

    assert isinstance(pred, Predicate)
    assert pred.description == "is_input"
    assert await pred(session.element(Node("n", tag="input")))
