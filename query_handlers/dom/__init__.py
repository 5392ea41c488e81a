"""
DOM package
-----------
Runs registered query handlers inside the page and exposes the results as
element handles with geometry and mouse helpers.

Consumers usually start from PageQueries:
  from query_handlers.dom import PageQueries
"""

from .engine import QueryEngine
from .errors import (
    ElementError,
    ElementNotFoundError,
    NodeDetachedError,
    NodeNotElementError,
    NodeNotVisibleError,
    WaitTimeoutError,
)
from .element import BoundingBox, BoxModel, ElementHandle, Point
from .page import PageQueries

__all__ = [
    "QueryEngine",
    "ElementError",
    "ElementNotFoundError",
    "NodeDetachedError",
    "NodeNotElementError",
    "NodeNotVisibleError",
    "WaitTimeoutError",
    "BoundingBox",
    "BoxModel",
    "ElementHandle",
    "Point",
    "PageQueries",
]
