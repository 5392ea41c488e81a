# query_handlers/runner.py
from __future__ import annotations

"""Query runner
---------------
Opens a Playwright browser, loads a URL and resolves one selector through a
registry. Backs the `query` CLI command.
"""

from pathlib import Path
from typing import List, Optional

from playwright.sync_api import sync_playwright

from query_handlers.dom import scripts
from query_handlers.dom.element import ElementHandle
from query_handlers.dom.page import PageQueries
from query_handlers.handlers.aria import register_builtin_handlers
from query_handlers.handlers.loader import register_from_file
from query_handlers.handlers.registry import QueryHandlerRegistry
from query_handlers.utils.config import Settings, get_settings
from query_handlers.utils.logger import get_logger
from query_handlers.utils.timing import measure


def build_registry(
    settings: Optional[Settings] = None,
    *,
    handlers_file: Optional[Path | str] = None,
    aria: Optional[bool] = None,
) -> QueryHandlerRegistry:
    """
    Fresh registry with the built-in handlers (unless disabled) and any
    handlers from `handlers_file`, falling back to settings.HANDLERS_FILE.
    """
    s = settings or get_settings()
    registry = QueryHandlerRegistry()
    if s.REGISTER_ARIA_HANDLER if aria is None else aria:
        register_builtin_handlers(registry)
    path = handlers_file or s.HANDLERS_FILE
    if path:
        register_from_file(registry, path)
    return registry


def describe(element: ElementHandle) -> dict:
    return element.evaluate(scripts.DESCRIBE_ELEMENT)


@measure("query")
def run_query(
    url: str,
    selector: str,
    *,
    registry: QueryHandlerRegistry,
    settings: Optional[Settings] = None,
    query_all: bool = False,
    wait: bool = False,
    timeout_ms: Optional[int] = None,
) -> List[dict]:
    """Return a short description (tag/id/class/text) of each matched element."""
    s = settings or get_settings()
    log = get_logger(__name__)

    with sync_playwright() as p:
        browser = getattr(p, s.BROWSER_TYPE.value).launch(**s.playwright_launch_kwargs())
        try:
            context = browser.new_context(**s.playwright_context_kwargs())
            page = context.new_page()
            log.info(f"Opening {url}")
            page.goto(url, wait_until="domcontentloaded", timeout=s.PAGE_LOAD_TIMEOUT)

            queries = PageQueries(page, registry, settings=s)
            if wait:
                first = queries.wait_for_selector(selector, timeout_ms=timeout_ms)
                if first is not None:
                    first.dispose()

            if query_all:
                elements = queries.query_selector_all(selector)
            else:
                found = queries.query_selector(selector)
                elements = [found] if found is not None else []
            log.info(f"{selector!r} matched {len(elements)} element(s)")
            return [describe(e) for e in elements]
        finally:
            browser.close()
