"""
Handlers package
----------------
Named query handlers, the per-session registry that resolves `name/arg`
selectors, the built-in `aria` handler and YAML handler definition files.
"""

from .errors import (
    DuplicateNameError,
    HandlerNotFoundError,
    InvalidHandlerError,
    InvalidNameError,
    QueryHandlerError,
)
from .handler import DEFAULT_HANDLER, QueryHandler
from .registry import QueryHandlerRegistry, validate_name
from .aria import ARIA_HANDLER_NAME, ARIA_QUERY_HANDLER, register_builtin_handlers
from .loader import load_handlers_file, register_from_file

__all__ = [
    "DuplicateNameError",
    "HandlerNotFoundError",
    "InvalidHandlerError",
    "InvalidNameError",
    "QueryHandlerError",
    "DEFAULT_HANDLER",
    "QueryHandler",
    "QueryHandlerRegistry",
    "validate_name",
    "ARIA_HANDLER_NAME",
    "ARIA_QUERY_HANDLER",
    "register_builtin_handlers",
    "load_handlers_file",
    "register_from_file",
]
