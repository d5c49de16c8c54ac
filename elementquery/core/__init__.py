"""
Core package for elementquery.
Lightweight package init to avoid import cycles.

Consumers should import submodules directly, e.g.:
  from elementquery.core.query import ElementQuery
  from elementquery.core.conditions import element_has_text
  from elementquery.core.query_loader import load_queries_file
"""

__all__: list[str] = []
