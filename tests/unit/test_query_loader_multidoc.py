from pathlib import Path
import textwrap

import pytest

from elementquery.core.by import By, SelectorStrategy
from elementquery.core.poller import ElementPoller
from elementquery.core.query_loader import QueryLoader, QuerySpec, load_queries_file, load_query
from elementquery.utils.config import ErrorPolicy

from .conftest import Node


MULTI = textwrap.dedent(
    """
    name: search_box
    poller: {kind: timeout, timeout_ms: 5000, interval_ms: 250}
    alternatives:
      - selector: "thiswont.match"
      - selector: {strategy: id, value: searchInput}
        filters:
          - {kind: class, value: search}
    ---
    name: results
    mode: all
    error_policy: abort_cycle
    alternatives:
      - selector: {strategy: xpath, value: "//li"}
        single: true
    """
)


def test_load_queries_file_multiple_docs(tmp_path: Path):
    f = tmp_path / "multi.yaml"
    f.write_text(MULTI, encoding="utf-8")

    specs = load_queries_file(f)

    assert [s.name for s in specs] == ["search_box", "results"]
    first, second = specs
    assert first.alternatives[0].selector == By.css("thiswont.match")
    assert first.alternatives[1].selector.strategy == SelectorStrategy.id
    assert first.poller == ElementPoller.timeout_with_interval(5000, 250)
    assert second.mode == "all"
    assert second.error_policy == ErrorPolicy.abort_cycle
    assert second.alternatives[0].single


def test_zero_alternatives_is_rejected(tmp_path: Path):
    f = tmp_path / "empty.yaml"
    f.write_text("name: nothing\nalternatives: []\n", encoding="utf-8")

    with pytest.raises(ValueError) as ei:
        load_queries_file(f)
    assert "alternatives" in str(ei.value)
    assert "document 1" in str(ei.value)


def test_filter_needs_a_value(tmp_path: Path):
    f = tmp_path / "bad.yaml"
    f.write_text(
        "name: bad\nalternatives:\n  - selector: a\n    filters:\n      - {kind: attribute, value: x}\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="needs a name"):
        load_query(f)


def test_env_substitution_and_default_name(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("SEARCH_ID", "searchInput")
    f = tmp_path / "by_env.yml"
    f.write_text("alternatives:\n  - selector: {strategy: id, value: '${SEARCH_ID}'}\n", encoding="utf-8")

    spec = load_query(f)

    assert spec.name == "by_env"
    assert spec.alternatives[0].selector == By.id("searchInput")


def test_load_directory_skips_invalid_files(tmp_path: Path):
    (tmp_path / "good.yaml").write_text(MULTI, encoding="utf-8")
    (tmp_path / "broken.yaml").write_text("name: [unclosed\n", encoding="utf-8")

    specs = QueryLoader().load_directory(tmp_path)

    assert len(specs) == 2


@pytest.mark.asyncio
async def test_spec_builds_a_working_query(session, driver):
    driver.add(By.id("searchInput"), Node("plain"), Node("hit", attrs={"class": "search"}))
    spec = QuerySpec.model_validate(
        {
            "name": "search_box",
            "alternatives": [
                {"selector": "thiswont.match"},
                {
                    "selector": {"strategy": "id", "value": "searchInput"},
                    "filters": [
                        {"kind": "class", "value": "search"},
                        {"kind": "enabled"},
                        {"kind": "text", "value": "nope", "negate": True},
                    ],
                },
            ],
        }
    )

    query = spec.build(session)
    elem = await spec.run(session)

    assert query.selector_exprs == (By.css("thiswont.match"), By.id("searchInput"))
    assert elem.handle.name == "hit"
