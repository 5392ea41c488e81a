# query_handlers/dom/engine.py
from __future__ import annotations

"""Query dispatch
-----------------
Runs a handler's page-side functions against a scope handle and turns the
results into Playwright element handles. Handlers that only define one of
`query_one` / `query_all` get the other derived from it:

  - query_one from query_all: first element of the collection, or None
  - query_all from query_one: [element] when found, else []

Nothing here waits, retries or caches; every call re-runs the handler.
"""

from typing import Any, List, Optional

from playwright.sync_api import ElementHandle as PWElementHandle, JSHandle

from query_handlers.handlers.handler import QueryHandler
from query_handlers.handlers.registry import QueryHandlerRegistry
from query_handlers.utils.logger import get_logger

log = get_logger(__name__)


def collect_elements(collection: JSHandle) -> List[PWElementHandle]:
    """
    Element handles held by an array-like page value, in index order.
    Non-element entries and the collection handle itself are disposed.
    """
    indexed = []
    for key, handle in collection.get_properties().items():
        if key.isdigit():
            indexed.append((int(key), handle))
        else:
            handle.dispose()
    indexed.sort(key=lambda pair: pair[0])

    out: List[PWElementHandle] = []
    for _, handle in indexed:
        element = handle.as_element()
        if element is None:
            handle.dispose()
        else:
            out.append(element)
    collection.dispose()
    return out


def run_query_one(scope: Any, handler: QueryHandler, arg: str) -> Optional[PWElementHandle]:
    if handler.has_query_one:
        result = scope.evaluate_handle(handler.query_one, arg)
        element = result.as_element()
        if element is None:
            result.dispose()
        return element

    elements = run_query_all(scope, handler, arg)
    if not elements:
        return None
    for extra in elements[1:]:
        extra.dispose()
    return elements[0]


def run_query_all(scope: Any, handler: QueryHandler, arg: str) -> List[PWElementHandle]:
    if handler.has_query_all:
        return collect_elements(scope.evaluate_handle(handler.query_all, arg))

    element = run_query_one(scope, handler, arg)
    return [element] if element is not None else []


class QueryEngine:
    """Resolves selector strings through a registry and runs the chosen handler."""

    def __init__(self, registry: QueryHandlerRegistry) -> None:
        self.registry = registry

    def query_one(self, scope: Any, selector: str) -> Optional[PWElementHandle]:
        handler, arg = self.registry.resolve(selector)
        element = run_query_one(scope, handler, arg)
        log.debug(f"query_one {selector!r} -> {'found' if element is not None else 'none'}")
        return element

    def query_all(self, scope: Any, selector: str) -> List[PWElementHandle]:
        handler, arg = self.registry.resolve(selector)
        elements = run_query_all(scope, handler, arg)
        log.debug(f"query_all {selector!r} -> {len(elements)} element(s)")
        return elements
