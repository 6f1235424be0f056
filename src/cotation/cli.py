"""Click-based CLI for cotation.

Thin wrapper around library modules: wiring, logging setup, and exit codes.
"""

from __future__ import annotations

import asyncio
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

logger = logging.getLogger("cotation.cli")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from cotation.core import ConfigError, load_config

        try:
            ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
        except ConfigError as e:
            logger.error("Invalid configuration: %s", e)
            raise SystemExit(1)
    return ctx.obj["config"]


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="COTATION_CONFIG",
    default=None,
    help="Path to cotation.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="cotation")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Cotation: deadline-bounded USD-BRL quote server and client."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# init-db
# ---------------------------------------------------------------------------


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the quote ledger table if it does not exist."""
    from cotation.core import StorageError
    from cotation.storage import create_store

    config = _load_config(ctx)

    async def _run():
        store = await create_store(config.storage)
        return await store.count_records()

    try:
        count = _run_async(_run())
    except StorageError as e:
        logger.error("%s", e)
        raise SystemExit(1)

    console.print(
        f"[green]✓[/green] Ledger at [bold]{config.storage.sqlite_path}[/bold] "
        f"({count} records)",
        soft_wrap=True,
    )


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address. Default: from config.")
@click.option("--port", "-p", type=int, default=None, help="Port number. Default: from config.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the quote server (GET /cotacao)."""
    import uvicorn

    from cotation.api.app import create_app

    config = _load_config(ctx)
    host = host or config.server.host
    port = port or config.server.port

    console.print(f"Starting cotation server on [bold]{host}:{port}[/bold]")
    uvicorn.run(create_app(config), host=host, port=port, log_config=None)


# ---------------------------------------------------------------------------
# fetch
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--server-url", type=str, default=None, help="Quote endpoint URL. Default: from config.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file. Default: from config.",
)
@click.pass_context
def fetch(ctx: click.Context, server_url: str | None, output: str | None) -> None:
    """Fetch one quote from the server and write it to a file."""
    from pydantic import ValidationError

    from cotation.client import QuoteFetcher
    from cotation.core import ClientConfig, CotationError

    config = _load_config(ctx)
    overrides = {}
    if server_url:
        overrides["server_url"] = server_url
    if output:
        overrides["output_path"] = output
    try:
        client_config = ClientConfig.model_validate(
            {**config.client.model_dump(), **overrides}
        )
    except ValidationError as e:
        raise click.UsageError(str(e))

    try:
        _run_async(QuoteFetcher(client_config).fetch_and_save())
    except CotationError as e:
        logger.error("%s", e)
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
