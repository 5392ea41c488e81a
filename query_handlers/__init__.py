"""
Custom query handlers for Playwright
------------------------------------
Register named handlers, then query with `name/selector` strings:

  from query_handlers import PageQueries, QueryHandlerRegistry

  registry = QueryHandlerRegistry()
  registry.register("getByClass", {"query_all": "(el, c) => el.querySelectorAll(`.${c}`)"})
  elements = PageQueries(page, registry).query_selector_all("getByClass/foo")
"""

from query_handlers.handlers import (
    ARIA_QUERY_HANDLER,
    DEFAULT_HANDLER,
    DuplicateNameError,
    HandlerNotFoundError,
    InvalidHandlerError,
    InvalidNameError,
    QueryHandler,
    QueryHandlerError,
    QueryHandlerRegistry,
    load_handlers_file,
    register_builtin_handlers,
    register_from_file,
)
from query_handlers.dom import (
    BoundingBox,
    BoxModel,
    ElementError,
    ElementHandle,
    ElementNotFoundError,
    NodeDetachedError,
    NodeNotElementError,
    NodeNotVisibleError,
    PageQueries,
    Point,
    QueryEngine,
    WaitTimeoutError,
)

__version__ = "0.1.0"

__all__ = [
    "ARIA_QUERY_HANDLER",
    "DEFAULT_HANDLER",
    "DuplicateNameError",
    "HandlerNotFoundError",
    "InvalidHandlerError",
    "InvalidNameError",
    "QueryHandler",
    "QueryHandlerError",
    "QueryHandlerRegistry",
    "load_handlers_file",
    "register_builtin_handlers",
    "register_from_file",
    "BoundingBox",
    "BoxModel",
    "ElementError",
    "ElementHandle",
    "ElementNotFoundError",
    "NodeDetachedError",
    "NodeNotElementError",
    "NodeNotVisibleError",
    "PageQueries",
    "Point",
    "QueryEngine",
    "WaitTimeoutError",
]
