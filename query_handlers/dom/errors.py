# query_handlers/dom/errors.py
from __future__ import annotations


class ElementError(RuntimeError):
    pass


class NodeNotElementError(ElementError):
    def __init__(self) -> None:
        super().__init__("Node is not of type HTMLElement")


class NodeDetachedError(ElementError):
    def __init__(self) -> None:
        super().__init__("Node is detached from document")


class NodeNotVisibleError(ElementError):
    def __init__(self) -> None:
        super().__init__("Node is either not visible or not an HTMLElement")


class ElementNotFoundError(ElementError):
    def __init__(self, selector: str) -> None:
        super().__init__(f'failed to find element matching selector "{selector}"')
        self.selector = selector


class WaitTimeoutError(TimeoutError):
    def __init__(self, selector: str, timeout_ms: int) -> None:
        super().__init__(f'waiting for selector "{selector}" failed: timeout {timeout_ms}ms exceeded')
        self.selector = selector
        self.timeout_ms = timeout_ms
