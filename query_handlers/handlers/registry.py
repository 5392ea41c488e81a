# query_handlers/handlers/registry.py
from __future__ import annotations

import re
import threading
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from query_handlers.handlers.errors import (
    DuplicateNameError,
    HandlerNotFoundError,
    InvalidHandlerError,
    InvalidNameError,
)
from query_handlers.handlers.handler import DEFAULT_HANDLER, QueryHandler
from query_handlers.utils.logger import get_logger

log = get_logger(__name__)

_NAME_RE = re.compile(r"[a-zA-Z]+")
_PREFIX_RE = re.compile(r"([a-zA-Z]+)/(.*)", re.DOTALL)


def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
        raise InvalidNameError(str(name))
    return name


class QueryHandlerRegistry:
    """
    Named query handlers for one automation session.

    Selectors of the form `name/arg` dispatch to the handler registered under
    `name`; anything else is a plain CSS selector and uses DEFAULT_HANDLER.
    Each session owns its own registry, so handler sets are never shared by
    accident.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: Dict[str, QueryHandler] = {}

    # ---------- Mutation ----------

    def register(self, name: str, handler: Union[QueryHandler, Mapping[str, Any]]) -> QueryHandler:
        validate_name(name)
        if not isinstance(handler, QueryHandler):
            if not isinstance(handler, Mapping):
                raise InvalidHandlerError(
                    f"Expected a QueryHandler or mapping, got {type(handler).__name__}"
                )
            handler = QueryHandler.from_mapping(handler)

        with self._lock:
            if name in self._handlers:
                raise DuplicateNameError(name)
            self._handlers[name] = handler
        log.debug(f"Registered query handler {name!r} ({', '.join(handler.capabilities)})")
        return handler

    def unregister(self, name: str) -> None:
        with self._lock:
            removed = self._handlers.pop(name, None)
        if removed is None:
            log.debug(f"Unregister ignored, no query handler named {name!r}")
        else:
            log.debug(f"Unregistered query handler {name!r}")

    def clear(self) -> None:
        with self._lock:
            count = len(self._handlers)
            self._handlers.clear()
        log.debug(f"Cleared {count} query handler(s)")

    # ---------- Lookup ----------

    def get(self, name: str) -> Optional[QueryHandler]:
        with self._lock:
            return self._handlers.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._handlers

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def resolve(self, selector: str) -> Tuple[QueryHandler, str]:
        """
        Split `selector` into the handler that serves it and the argument
        passed to that handler.

        Raises:
            HandlerNotFoundError when the selector names an unregistered handler.
        """
        m = _PREFIX_RE.fullmatch(selector)
        if not m:
            return DEFAULT_HANDLER, selector

        name, arg = m.group(1), m.group(2)
        handler = self.get(name)
        if handler is None:
            raise HandlerNotFoundError(name)
        return handler, arg
