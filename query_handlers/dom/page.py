# query_handlers/dom/page.py
from __future__ import annotations

from typing import Callable, Optional, Union

from playwright.sync_api import Frame, JSHandle, Page

from query_handlers.dom import scripts
from query_handlers.dom.scope import QueryScope
from query_handlers.handlers.registry import QueryHandlerRegistry
from query_handlers.utils.config import Settings


class PageQueries(QueryScope):
    """
    Registry-aware `$`, `$$`, `$eval`, `$$eval` and `wait_for_selector` over a
    page's (or frame's) document.

    Usage:
        registry = QueryHandlerRegistry()
        registry.register("getById", {"query_one": "(el, id) => el.querySelector(`#${id}`)"})
        queries = PageQueries(page, registry)
        queries.query_selector("getById/foo")
    """

    def __init__(
        self,
        target: Union[Page, Frame],
        registry: QueryHandlerRegistry,
        settings: Optional[Settings] = None,
    ) -> None:
        super().__init__(registry, settings)
        self.frame: Frame = target.main_frame if hasattr(target, "main_frame") else target

    def _scope_handle(self) -> JSHandle:
        # Re-read per call: the document changes on navigation.
        return self.frame.evaluate_handle(scripts.DOCUMENT)

    def _release_scope(self, handle: JSHandle) -> None:
        handle.dispose()

    def _sleep(self) -> Callable[[int], None]:
        return self.frame.wait_for_timeout
