# query_handlers/handlers/loader.py
from __future__ import annotations

"""Handler definition files
---------------------------
Loads custom query handlers from YAML so they can be shared between runs:

    handlers:
      getById:
        query_one: "(el, sel) => el.querySelector(`[id=\"${sel}\"]`)"

`$ENV{VAR}` references are replaced from the environment before validation.
The `${...}` form is left alone: handler sources are JavaScript, where it
is template-literal syntax.
"""

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from query_handlers.handlers.errors import QueryHandlerError
from query_handlers.handlers.handler import QueryHandler
from query_handlers.handlers.registry import QueryHandlerRegistry, validate_name
from query_handlers.utils.logger import get_logger

log = get_logger(__name__)

_ENV_RE = re.compile(r"\$ENV\{([A-Za-z_][A-Za-z0-9_]*)\}")


# ---------- Schema ----------


class HandlerSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    query_one: Optional[str] = Field(default=None, alias="queryOne")
    query_all: Optional[str] = Field(default=None, alias="queryAll")

    @field_validator("query_one", "query_all")
    @classmethod
    def _blank_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def _needs_one(self) -> "HandlerSpec":
        if self.query_one is None and self.query_all is None:
            raise ValueError("handler needs query_one or query_all")
        return self

    def to_handler(self) -> QueryHandler:
        return QueryHandler(query_one=self.query_one, query_all=self.query_all)


class HandlersFile(BaseModel):
    version: str = Field(default="1")
    handlers: dict[str, HandlerSpec] = Field(default_factory=dict)

    @field_validator("handlers")
    @classmethod
    def _valid_names(cls, v: dict[str, HandlerSpec]) -> dict[str, HandlerSpec]:
        for name in v:
            try:
                validate_name(name)
            except QueryHandlerError as e:
                raise ValueError(f"{name!r}: {e}") from e
        return v


# ---------- Helpers ----------


def _subst_env(obj):
    if isinstance(obj, str):
        def repl(m):
            return os.environ.get(m.group(1), m.group(0))
        return _ENV_RE.sub(repl, obj)
    if isinstance(obj, list):
        return [_subst_env(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _subst_env(v) for k, v in obj.items()}
    return obj


# ---------- Public API ----------


def load_handlers_file(path: Path | str) -> dict[str, QueryHandler]:
    """Parse and validate a handlers YAML file; returns name -> QueryHandler."""
    fp = Path(path)
    if not fp.exists():
        raise FileNotFoundError(f"Handlers file not found: {fp}")
    try:
        data = yaml.safe_load(fp.read_text(encoding="utf-8"))
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Handlers file {fp} must define a mapping/object at the top level.")
        parsed = HandlersFile.model_validate(_subst_env(data))
        return {name: spec.to_handler() for name, spec in parsed.handlers.items()}
    except ValidationError as ve:
        lines = [f"Invalid handlers file '{fp}':"]
        for e in ve.errors():
            loc = ".".join(str(p) for p in e.get("loc", []))
            msg = e.get("msg", "invalid value")
            lines.append(f"  - {loc}: {msg}")
        raise ValueError("\n".join(lines)) from ve
    except yaml.YAMLError as ye:
        raise ValueError(f"YAML parse error in {fp}: {ye}") from ye
    except QueryHandlerError as he:
        raise ValueError(f"Invalid handlers file '{fp}': {he}") from he


def register_from_file(registry: QueryHandlerRegistry, path: Path | str) -> list[str]:
    """Register every handler defined in `path`; returns the registered names."""
    handlers = load_handlers_file(path)
    for name, handler in handlers.items():
        registry.register(name, handler)
    log.info(f"Registered {len(handlers)} query handler(s) from {path}")
    return list(handlers)
