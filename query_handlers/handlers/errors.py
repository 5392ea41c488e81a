# query_handlers/handlers/errors.py
from __future__ import annotations


class QueryHandlerError(Exception):
    """Base class for registry and selector-resolution failures."""


class InvalidNameError(QueryHandlerError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__("Custom query handler names may only contain [a-zA-Z]")
        self.name = name


class InvalidHandlerError(QueryHandlerError, ValueError):
    pass


class DuplicateNameError(QueryHandlerError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f'A custom query handler named "{name}" already exists')
        self.name = name


class HandlerNotFoundError(QueryHandlerError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Query set to use "{name}", but no query handler of that name was found')
        self.name = name
