# query_handlers/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Inspect configuration and handlers, and run one-off selector queries against
a live page. Thin wrapper around the registry and the query runner.
"""

import json
import sys
from typing import Optional

import click

from query_handlers.dom.errors import ElementError, WaitTimeoutError
from query_handlers.handlers.errors import QueryHandlerError
from query_handlers.utils.config import get_settings
from query_handlers.utils.logger import bound, get_logger, set_log_level


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.version_option(package_name="custom-query-handlers")
def cli(log_level: Optional[str]):
    _ = get_settings()
    if log_level:
        set_log_level(log_level.upper())


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    _echo_json(get_settings().model_dump(mode="json"))


@cli.command("handlers")
@click.option("--file", "handlers_file", type=click.Path(dir_okay=False, exists=True), default=None,
              help="YAML file of custom handlers (defaults to HANDLERS_FILE)")
@click.option("--aria/--no-aria", default=None, help="Include the built-in aria handler")
def cmd_handlers(handlers_file: Optional[str], aria: Optional[bool]):
    """List available query handlers and what they support."""
    from query_handlers.runner import build_registry  # local import keeps startup light

    try:
        registry = build_registry(get_settings(), handlers_file=handlers_file, aria=aria)
    except (OSError, ValueError, QueryHandlerError) as e:
        click.echo(f"ERR {e}")
        sys.exit(1)

    names = registry.names()
    if not names:
        click.echo("No query handlers registered.")
        return
    click.echo(f"Found {len(names)} handler(s):\n")
    for name in names:
        handler = registry.get(name)
        caps = ", ".join(handler.capabilities) if handler else "-"
        click.echo(f" - {name}  ({caps})")


@cli.command("query")
@click.argument("url")
@click.argument("selector")
@click.option("--all", "query_all", is_flag=True, default=False, help="Return every match, not just the first")
@click.option("--wait", is_flag=True, default=False, help="Wait for the selector before querying")
@click.option("--timeout-ms", type=int, default=None, help="Override WAIT_FOR_SELECTOR_TIMEOUT_MS")
@click.option("--file", "handlers_file", type=click.Path(dir_okay=False, exists=True), default=None,
              help="YAML file of custom handlers (defaults to HANDLERS_FILE)")
@click.option("--aria/--no-aria", default=None, help="Include the built-in aria handler")
def cmd_query(
    url: str,
    selector: str,
    query_all: bool,
    wait: bool,
    timeout_ms: Optional[int],
    handlers_file: Optional[str],
    aria: Optional[bool],
):
    """
    Resolve SELECTOR on the page at URL and print the matches as JSON.

    Examples:
      query-handlers query https://example.com "aria/More information...&link"
      query-handlers query --all --file handlers.yaml https://example.com "getByClass/foo"
    """
    from query_handlers.runner import build_registry, run_query  # local import keeps startup light

    settings = get_settings()
    log = get_logger(__name__)

    try:
        with bound(url=url, selector=selector):
            registry = build_registry(settings, handlers_file=handlers_file, aria=aria)
            rows = run_query(
                url,
                selector,
                registry=registry,
                settings=settings,
                query_all=query_all,
                wait=wait,
                timeout_ms=timeout_ms,
            )
    except (QueryHandlerError, ElementError, WaitTimeoutError, OSError, ValueError) as e:
        log.debug(f"query failed: {e!r}")
        click.echo(f"ERR {e}")
        sys.exit(1)

    _echo_json({"selector": selector, "count": len(rows), "elements": rows})
    sys.exit(0 if rows else 1)


def main() -> None:
    cli(prog_name="query-handlers")


if __name__ == "__main__":
    main()
