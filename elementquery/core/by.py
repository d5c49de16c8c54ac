# elementquery/core/by.py
from __future__ import annotations

"""Selector expressions
-----------------------
`By` is the immutable (strategy, value) pair every query alternative is built
from. Drivers translate it into their own locator syntax.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SelectorStrategy(str, Enum):
    css = "css"
    xpath = "xpath"
    id = "id"
    name_ = "name"  # `name` would shadow Enum.name
    tag = "tag"
    class_name = "class_name"
    link_text = "link_text"
    partial_link_text = "partial_link_text"
    text = "text"


class By(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: SelectorStrategy = Field(default=SelectorStrategy.css)
    value: str = Field(..., description="Locator string, interpreted per strategy")

    @model_validator(mode="before")
    @classmethod
    def _from_shorthand(cls, data: Any) -> Any:
        # A bare string is a CSS selector (handy in YAML query files)
        if isinstance(data, str):
            return {"strategy": SelectorStrategy.css, "value": data}
        return data

    @field_validator("value")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("selector value cannot be empty")
        return v

    # ---------- Constructors ----------

    @classmethod
    def css(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.css, value=value)

    @classmethod
    def xpath(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.xpath, value=value)

    @classmethod
    def id(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.id, value=value)

    @classmethod
    def name(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.name_, value=value)

    @classmethod
    def tag(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.tag, value=value)

    @classmethod
    def class_name(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.class_name, value=value)

    @classmethod
    def link_text(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.link_text, value=value)

    @classmethod
    def partial_link_text(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.partial_link_text, value=value)

    @classmethod
    def text(cls, value: str) -> "By":
        return cls(strategy=SelectorStrategy.text, value=value)

    def __str__(self) -> str:
        return f"{self.strategy.value}:{self.value}"


def selector_summary(selectors: "list[By] | tuple[By, ...]") -> str:
    """Comma-separated list of selectors, e.g. `[css:#a,id:b]`."""
    return "[" + ",".join(str(s) for s in selectors) + "]"


def xpath_literal(value: str) -> str:
    """Safely embed string literals inside XPath expressions."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


__all__ = ["SelectorStrategy", "By", "selector_summary", "xpath_literal"]
