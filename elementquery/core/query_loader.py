# elementquery/core/query_loader.py
from __future__ import annotations

"""Query definition schema and loader
-------------------------------------
Defines the pydantic models for declarative queries and loads them from YAML
(multi-document files supported). A definition compiles into an ordinary
`ElementQuery`:

    name: search_box
    mode: first
    poller: {kind: timeout, timeout_ms: 5000, interval_ms: 250}
    alternatives:
      - selector: "thiswont.match"
      - selector: {strategy: id, value: searchInput}
        filters:
          - {kind: class, value: search}
          - {kind: enabled, negate: true}
"""

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Optional, Union
import os
import re

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from elementquery.core import conditions
from elementquery.core.by import By
from elementquery.core.conditions import Predicate
from elementquery.core.matching import RegexMatch, StringMatch
from elementquery.core.poller import ElementPoller
from elementquery.utils.config import ErrorPolicy
from elementquery.utils.logger import get_logger
from elementquery.utils.timing import measure

if TYPE_CHECKING:
    from elementquery.core.query import ElementQuery
    from elementquery.core.session import QuerySession, WebElement

log = get_logger(__name__)


# ---------- Core enums ----------


class FilterKind(str, Enum):
    text = "text"
    id = "id"
    class_ = "class"
    tag = "tag"
    value = "value"
    attribute = "attribute"
    property = "property"
    css_property = "css_property"
    enabled = "enabled"
    selected = "selected"
    displayed = "displayed"
    clickable = "clickable"


class MatchMode(str, Enum):
    exact = "exact"
    partial = "partial"
    word = "word"
    regex = "regex"


_STATE_KINDS = {FilterKind.enabled, FilterKind.selected, FilterKind.displayed, FilterKind.clickable}
_NAMED_KINDS = {FilterKind.attribute, FilterKind.property, FilterKind.css_property}


# ---------- Models ----------


class FilterSpec(BaseModel):
    kind: FilterKind
    name: Optional[str] = Field(default=None, description="Attribute / property / CSS property name")
    value: Optional[str] = Field(default=None, description="Expected value (text-like kinds)")
    match: MatchMode = Field(default=MatchMode.exact)
    case_insensitive: bool = Field(default=False)
    negate: bool = Field(default=False)
    ignore_errors: bool = Field(default=False)

    @model_validator(mode="after")
    def _required_fields(self) -> "FilterSpec":
        if self.kind in _STATE_KINDS:
            return self
        if self.value is None:
            raise ValueError(f"filter '{self.kind.value}' needs a value")
        if self.kind in _NAMED_KINDS and not (self.name or "").strip():
            raise ValueError(f"filter '{self.kind.value}' needs a name")
        if self.match == MatchMode.regex:
            try:
                re.compile(self.value)
            except re.error as e:
                raise ValueError(f"invalid regex {self.value!r}: {e}") from e
        return self

    def needle(self):
        if self.match == MatchMode.regex:
            return RegexMatch(re.compile(self.value, re.IGNORECASE if self.case_insensitive else 0))
        m = StringMatch(self.value)
        if self.match == MatchMode.partial:
            m = m.partial()
        elif self.match == MatchMode.word:
            m = m.word()
        return m.case_insensitive() if self.case_insensitive else m

    def to_predicate(self) -> Predicate:
        ie = self.ignore_errors
        if self.kind == FilterKind.enabled:
            pred = conditions.element_is_enabled(ie)
        elif self.kind == FilterKind.selected:
            pred = conditions.element_is_selected(ie)
        elif self.kind == FilterKind.displayed:
            pred = conditions.element_is_displayed(ie)
        elif self.kind == FilterKind.clickable:
            pred = conditions.element_is_clickable(ie)
        elif self.kind == FilterKind.text:
            pred = conditions.element_has_text(self.needle(), ie)
        elif self.kind == FilterKind.id:
            pred = conditions.element_has_id(self.needle(), ie)
        elif self.kind == FilterKind.class_:
            # exact single class uses classList; anything fancier matches tokens
            target = self.value if self.match == MatchMode.exact and not self.case_insensitive else self.needle()
            pred = conditions.element_has_class(target, ie)
        elif self.kind == FilterKind.tag:
            pred = conditions.element_has_tag(self.needle(), ie)
        elif self.kind == FilterKind.value:
            pred = conditions.element_has_value(self.needle(), ie)
        elif self.kind == FilterKind.attribute:
            pred = conditions.element_has_attribute(self.name, self.needle(), ie)
        elif self.kind == FilterKind.property:
            pred = conditions.element_has_property(self.name, self.needle(), ie)
        else:
            pred = conditions.element_has_css_property(self.name, self.needle(), ie)
        return pred.negate() if self.negate else pred


class AlternativeSpec(BaseModel):
    selector: By
    filters: list[FilterSpec] = Field(default_factory=list)
    single: bool = Field(default=False, description="Use find_element instead of find_elements")


class QuerySpec(BaseModel):
    version: str = Field(default="1")
    name: str = Field(..., description="Query name, e.g. 'search_box'")
    description: Optional[str] = None
    mode: Literal["first", "all"] = Field(default="first")
    poller: Optional[ElementPoller] = Field(default=None, description="Overrides the session default")
    error_policy: Optional[ErrorPolicy] = None
    alternatives: list[AlternativeSpec] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _name_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    def build(self, session: "QuerySession", within: Optional["WebElement"] = None) -> "ElementQuery":
        """Compile into an ElementQuery bound to `session` (optionally scoped)."""
        query = session.query(self.alternatives[0].selector, within=within)
        for idx, alt in enumerate(self.alternatives):
            if idx > 0:
                query.or_(alt.selector)
            if alt.single:
                query.with_single_selector()
            for f in alt.filters:
                query.with_filter(f.to_predicate())
        if self.poller is not None:
            query.with_poller(self.poller)
        if self.error_policy is not None:
            query.with_error_policy(self.error_policy)
        return query

    async def run(
        self, session: "QuerySession", within: Optional["WebElement"] = None
    ) -> Union["WebElement", list["WebElement"]]:
        query = self.build(session, within)
        return await (query.first() if self.mode == "first" else query.all())


# ---------- Public API ----------


def _subst_env(obj):
    """Replace ${VAR} in every string with the environment value (left as-is if unset)."""
    if isinstance(obj, str):
        def repl(m):
            key = m.group(1)
            return os.environ.get(key, m.group(0))
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}", repl, obj)
    if isinstance(obj, list):
        return [_subst_env(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _subst_env(v) for k, v in obj.items()}
    return obj


def _format_validation_error(ve: ValidationError, header: str) -> str:
    lines = [header]
    for e in ve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []))
        msg = e.get("msg", "invalid value")
        lines.append(f"  - {loc}: {msg}")
    return "\n".join(lines)


@measure("load_queries_file")
def load_queries_file(path: Path | str) -> list[QuerySpec]:
    """Load one or more query definitions from a YAML file (supports multi-document)."""
    q_path = Path(path)
    if not q_path.exists():
        raise FileNotFoundError(f"Query file not found: {q_path}")
    try:
        docs = list(yaml.safe_load_all(q_path.read_text(encoding="utf-8")))
    except yaml.YAMLError as ye:
        raise ValueError(f"YAML parse error in {q_path}: {ye}") from ye

    out: list[QuerySpec] = []
    for idx, data in enumerate(docs, start=1):
        if data is None:
            continue
        if not isinstance(data, dict):
            raise ValueError(f"Document {idx} in {q_path} must be a mapping/object.")
        data.setdefault("name", q_path.stem if len(docs) == 1 else f"{q_path.stem}_{idx}")
        try:
            out.append(QuerySpec.model_validate(_subst_env(data)))
        except ValidationError as ve:
            raise ValueError(
                _format_validation_error(ve, f"Invalid query '{q_path}' (document {idx}):")
            ) from ve
    if not out:
        raise ValueError(f"No query documents found in {q_path}")
    log.debug(f"Loaded {len(out)} query definition(s) from {q_path}")
    return out


def load_query(path: Path | str) -> QuerySpec:
    """Load a single-document query file."""
    specs = load_queries_file(path)
    if len(specs) != 1:
        raise ValueError(f"Expected exactly one query in {path}, found {len(specs)}")
    return specs[0]


def find_query_files(root: Path, recursive: bool = True) -> list[Path]:
    if recursive:
        return sorted(list(root.rglob("*.yaml")) + list(root.rglob("*.yml")))
    return sorted(list(root.glob("*.yaml")) + list(root.glob("*.yml")))


class QueryLoader:
    """Load every query definition under a directory, skipping invalid files."""

    def load_directory(self, root: Path, *, recursive: bool = True) -> list[QuerySpec]:
        specs: list[QuerySpec] = []
        for fp in find_query_files(root, recursive):
            try:
                specs.extend(load_queries_file(fp))
            except (ValueError, OSError) as e:
                log.warning(f"Skipping {fp}: {e}")
        return specs


__all__ = [
    "FilterKind",
    "MatchMode",
    "FilterSpec",
    "AlternativeSpec",
    "QuerySpec",
    "load_query",
    "load_queries_file",
    "find_query_files",
    "QueryLoader",
]
