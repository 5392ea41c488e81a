# query_handlers/dom/scope.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Optional

from query_handlers.dom import scripts
from query_handlers.dom.engine import QueryEngine
from query_handlers.dom.errors import ElementNotFoundError, WaitTimeoutError
from query_handlers.handlers.registry import QueryHandlerRegistry
from query_handlers.utils.config import Settings, get_settings
from query_handlers.utils.logger import get_logger
from query_handlers.utils.timing import wait_for

log = get_logger(__name__)

if TYPE_CHECKING:
    from query_handlers.dom.element import ElementHandle


class QueryScope:
    """
    `$`-style queries against one root node.

    Subclasses provide `_scope_handle()` (the node queries run under) and a
    page-aware sleep for polling.
    """

    def __init__(self, registry: QueryHandlerRegistry, settings: Optional[Settings] = None) -> None:
        self.registry = registry
        self.settings = settings or get_settings()
        self.engine = QueryEngine(registry)

    # ---------- Subclass hooks ----------

    def _scope_handle(self) -> Any:
        raise NotImplementedError

    def _release_scope(self, handle: Any) -> None:
        """Dispose a handle returned by `_scope_handle` if it was created per call."""

    def _sleep(self) -> Callable[[int], None]:
        raise NotImplementedError

    def _wrap(self, handle: Any) -> "ElementHandle":
        from query_handlers.dom.element import ElementHandle  # local import to avoid circulars

        return ElementHandle(handle, self.registry, settings=self.settings)

    # ---------- Queries ----------

    def query_selector(self, selector: str) -> Optional["ElementHandle"]:
        """First element matching `selector`, or None."""
        scope = self._scope_handle()
        try:
            found = self.engine.query_one(scope, selector)
        finally:
            self._release_scope(scope)
        return self._wrap(found) if found is not None else None

    def query_selector_all(self, selector: str) -> List["ElementHandle"]:
        """All elements matching `selector`, in the order the handler produced them."""
        scope = self._scope_handle()
        try:
            found = self.engine.query_all(scope, selector)
        finally:
            self._release_scope(scope)
        return [self._wrap(h) for h in found]

    def eval_on_selector(self, selector: str, expression: str, arg: Any = None) -> Any:
        """Evaluate `expression(element, arg)` on the first match."""
        element = self.query_selector(selector)
        if element is None:
            raise ElementNotFoundError(selector)
        try:
            return element.evaluate(expression, arg)
        finally:
            element.dispose()

    def eval_on_selector_all(self, selector: str, expression: str, arg: Any = None) -> Any:
        """Evaluate `expression(elements, arg)` with every match as one array."""
        elements = self.query_selector_all(selector)
        handles = [e.as_playwright() for e in elements]
        scope = self._scope_handle()
        try:
            return scope.evaluate(scripts.with_elements(expression), [handles, arg])
        finally:
            self._release_scope(scope)
            for e in elements:
                e.dispose()

    def wait_for_selector(
        self,
        selector: str,
        *,
        visible: bool = False,
        hidden: bool = False,
        timeout_ms: Optional[int] = None,
        interval_ms: Optional[int] = None,
    ) -> Optional["ElementHandle"]:
        """
        Poll until `selector` matches (and is visible, when asked) or, with
        `hidden=True`, until it no longer matches a visible element.

        Returns the element, or None when waiting for `hidden`.
        Raises WaitTimeoutError when `timeout_ms` elapses (0 waits forever).
        """
        if visible and hidden:
            raise ValueError("visible and hidden are mutually exclusive")
        timeout = self.settings.WAIT_FOR_SELECTOR_TIMEOUT_MS if timeout_ms is None else timeout_ms
        interval = self.settings.WAIT_FOR_SELECTOR_POLL_MS if interval_ms is None else interval_ms

        result: dict = {}

        def _poll() -> bool:
            element = self.query_selector(selector)
            shown = element is not None and (not (visible or hidden) or element.is_visible())
            if hidden:
                if element is not None:
                    element.dispose()
                return not shown
            if shown:
                result["element"] = element
                return True
            if element is not None:
                element.dispose()
            return False

        try:
            wait_for(_poll, timeout, interval_ms=interval, description=selector, sleep=self._sleep())
        except TimeoutError as e:
            raise WaitTimeoutError(selector, timeout) from e
        log.debug(f"wait_for_selector {selector!r} satisfied")
        return result.get("element")
