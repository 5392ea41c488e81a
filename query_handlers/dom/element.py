# query_handlers/dom/element.py
from __future__ import annotations

"""Element handles
------------------
Wraps a Playwright element handle with registry-aware queries scoped to the
element, geometry (bounding box, box model), viewport checks and mouse
interaction that reports why a node cannot be clicked.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from playwright.sync_api import ElementHandle as PWElementHandle, Frame

from query_handlers.dom import scripts
from query_handlers.dom.errors import NodeDetachedError, NodeNotElementError, NodeNotVisibleError
from query_handlers.dom.scope import QueryScope
from query_handlers.handlers.registry import QueryHandlerRegistry
from query_handlers.utils.config import Settings
from query_handlers.utils.timing import sleep_ms


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


Quad = Tuple[Point, Point, Point, Point]  # top-left, top-right, bottom-right, bottom-left


@dataclass(frozen=True)
class BoxModel:
    content: Quad
    padding: Quad
    border: Quad
    margin: Quad
    width: float
    height: float


def _quad(rect: dict, offset: Point) -> Quad:
    left = rect["x"] + offset.x
    top = rect["y"] + offset.y
    right = left + rect["width"]
    bottom = top + rect["height"]
    return (Point(left, top), Point(right, top), Point(right, bottom), Point(left, bottom))


_POINT_ERRORS = {
    "detached": NodeDetachedError,
    "not-element": NodeNotElementError,
    "not-visible": NodeNotVisibleError,
}


class ElementHandle(QueryScope):
    """A DOM node in the page plus queries rooted at it."""

    def __init__(
        self,
        handle: PWElementHandle,
        registry: QueryHandlerRegistry,
        settings: Optional[Settings] = None,
    ) -> None:
        super().__init__(registry, settings)
        self._handle = handle

    def __repr__(self) -> str:
        return f"ElementHandle({self._handle!r})"

    # ---------- QueryScope hooks ----------

    def _scope_handle(self) -> PWElementHandle:
        return self._handle

    def _sleep(self) -> Callable[[int], None]:
        frame = self._handle.owner_frame()
        return frame.wait_for_timeout if frame is not None else sleep_ms

    # ---------- Basics ----------

    def as_playwright(self) -> PWElementHandle:
        return self._handle

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        return self._handle.evaluate(expression, arg)

    def dispose(self) -> None:
        self._handle.dispose()

    def is_visible(self) -> bool:
        return bool(self._handle.evaluate(scripts.IS_VISIBLE))

    def content_frame(self) -> Optional[Frame]:
        """The frame shown by an <iframe>/<frame> element, else None."""
        return self._handle.content_frame()

    # ---------- Geometry ----------

    def bounding_box(self) -> Optional[BoundingBox]:
        """Border box in main-frame CSS pixels; None when the element has no layout."""
        box = self._handle.bounding_box()
        if box is None:
            return None
        return BoundingBox(x=box["x"], y=box["y"], width=box["width"], height=box["height"])

    def box_model(self) -> Optional[BoxModel]:
        raw = self._handle.evaluate(scripts.BOX_MODEL)
        if raw is None:
            return None
        offset = self._frame_offset()
        return BoxModel(
            content=_quad(raw["content"], offset),
            padding=_quad(raw["padding"], offset),
            border=_quad(raw["border"], offset),
            margin=_quad(raw["margin"], offset),
            width=raw["width"],
            height=raw["height"],
        )

    def _frame_offset(self) -> Point:
        # Sum of each ancestor frame's viewport origin, up to the main frame.
        x = y = 0.0
        frame = self._handle.owner_frame()
        while frame is not None and frame.parent_frame is not None:
            owner = frame.frame_element()
            try:
                origin = owner.evaluate(scripts.FRAME_CONTENT_ORIGIN)
            finally:
                owner.dispose()
            x += origin["x"]
            y += origin["y"]
            frame = frame.parent_frame
        return Point(x, y)

    def is_intersecting_viewport(self) -> bool:
        return bool(self._handle.evaluate(scripts.INTERSECTS_VIEWPORT))

    # ---------- Mouse ----------

    def clickable_point(self) -> Point:
        """
        Centre of the first non-empty client rect, in main-frame coordinates.
        Scrolls the element into view first when it is outside the viewport.
        """
        res = self._handle.evaluate(scripts.CLICKABLE_POINT)
        error = res.get("error")
        if error:
            raise _POINT_ERRORS[error]()
        offset = self._frame_offset()
        return Point(res["x"] + offset.x, res["y"] + offset.y)

    def _mouse(self):
        frame = self._handle.owner_frame()
        if frame is None:
            raise NodeDetachedError()
        return frame.page.mouse

    def hover(self) -> None:
        point = self.clickable_point()
        self._mouse().move(point.x, point.y)

    def click(self, *, button: str = "left", click_count: int = 1, delay_ms: int = 0) -> None:
        point = self.clickable_point()
        self._mouse().click(point.x, point.y, button=button, click_count=click_count, delay=delay_ms)
