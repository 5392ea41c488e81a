# query_handlers/handlers/handler.py
from __future__ import annotations

"""Query handler record
-----------------------
A handler is a pair of optional page-side functions, `query_one` and
`query_all`, each given as JavaScript source of the form
`(scope, selector) => ...`. They run inside the page's script realm with the
scope node (Element, Document or ShadowRoot) and the selector text that
followed the `name/` prefix.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from query_handlers.handlers.errors import InvalidHandlerError


def _clean_source(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidHandlerError(f"{field} must be JavaScript function source, got {type(value).__name__}")
    value = value.strip()
    if not value:
        raise InvalidHandlerError(f"{field} cannot be empty")
    return value


@dataclass(frozen=True)
class QueryHandler:
    query_one: Optional[str] = None
    query_all: Optional[str] = None

    def __post_init__(self) -> None:
        one = _clean_source(self.query_one, "query_one")
        many = _clean_source(self.query_all, "query_all")
        if one is None and many is None:
            raise InvalidHandlerError("A query handler needs at least one of query_one or query_all")
        object.__setattr__(self, "query_one", one)
        object.__setattr__(self, "query_all", many)

    @property
    def has_query_one(self) -> bool:
        return self.query_one is not None

    @property
    def has_query_all(self) -> bool:
        return self.query_all is not None

    @property
    def capabilities(self) -> tuple[str, ...]:
        caps = []
        if self.has_query_one:
            caps.append("query_one")
        if self.has_query_all:
            caps.append("query_all")
        return tuple(caps)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "QueryHandler":
        """Build a handler from `query_one`/`query_all` (or `queryOne`/`queryAll`) keys."""
        if not isinstance(data, Mapping):
            raise InvalidHandlerError(f"Expected a QueryHandler or mapping, got {type(data).__name__}")
        unknown = set(data) - {"query_one", "query_all", "queryOne", "queryAll"}
        if unknown:
            raise InvalidHandlerError(f"Unknown query handler keys: {', '.join(sorted(unknown))}")
        return cls(
            query_one=data.get("query_one", data.get("queryOne")),
            query_all=data.get("query_all", data.get("queryAll")),
        )


# Plain CSS selectors resolve through the platform's own querySelector(All).
DEFAULT_HANDLER = QueryHandler(
    query_one="(scope, selector) => scope.querySelector(selector)",
    query_all="(scope, selector) => scope.querySelectorAll(selector)",
)
