# src/provider_resolver/main.py
"""Command-line entry point for provider-resolver."""

from __future__ import annotations

import asyncio
import json
from typing import Optional

import typer
from chuk_term.ui import format_table, output
from dotenv import load_dotenv

from provider_resolver.config.env_vars import EnvVar
from provider_resolver.config.logging import get_logger, setup_logging
from provider_resolver.core.model_resolver import ModelResolver
from provider_resolver.model_management.errors import ProviderError
from provider_resolver.model_management.ranking import ModelRef

logger = get_logger("main")

app = typer.Typer(add_completion=False, help="Resolve LLM providers and models")


@app.callback()
def main_callback(
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Suppress most log output"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable verbose logging"),
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Set log level", envvar=EnvVar.LOG_LEVEL.value
    ),
    log_file: Optional[str] = typer.Option(
        None, "--log-file", help="Also write a rotating debug log to this file"
    ),
) -> None:
    """Configure logging before any command runs."""
    setup_logging(level=log_level, quiet=quiet, verbose=verbose, log_file=log_file)


async def _list_models(provider: Optional[str], verbose: bool) -> list[str]:
    resolver = ModelResolver()
    try:
        providers = await resolver.list()
        logger.debug(f"{len(providers)} active providers")
        if provider is not None and provider not in providers:
            raise ProviderError(f"Unknown provider: {provider}")

        lines: list[str] = []
        for provider_id, active in sorted(providers.items()):
            if provider is not None and provider_id != provider:
                continue
            for model in resolver.sort(active.info.models.values()):
                lines.append(f"{provider_id}/{model.id}")
                if verbose:
                    lines.append(model.model_dump_json(indent=2, exclude_none=True))
        return lines
    finally:
        await resolver.dispose()


@app.command("models")
def models_command(
    provider: Optional[str] = typer.Argument(None, help="Only list this provider"),
    verbose: bool = typer.Option(
        False, "--verbose", help="Include model metadata as JSON"
    ),
) -> None:
    """List available models as provider/model."""
    try:
        lines = asyncio.run(_list_models(provider, verbose))
    except ProviderError as exc:
        output.error(str(exc))
        raise typer.Exit(1)

    for line in lines:
        typer.echo(line)


async def _providers_table() -> list[dict[str, str]]:
    resolver = ModelResolver()
    try:
        rows = []
        for provider_id, active in sorted((await resolver.list()).items()):
            rows.append(
                {
                    "Provider": provider_id,
                    "Source": active.source.value,
                    "Models": str(len(active.info.models)),
                }
            )
        return rows
    finally:
        await resolver.dispose()


@app.command("providers")
def providers_command() -> None:
    """Show active providers and where they were activated from."""
    rows = asyncio.run(_providers_table())
    if not rows:
        output.info("No providers available.")
        return
    table = format_table(
        rows,
        title=f"{len(rows)} Active Providers",
        columns=["Provider", "Source", "Models"],
    )
    output.print_table(table)


async def _default_model() -> ModelRef:
    resolver = ModelResolver()
    try:
        return await resolver.default_model()
    finally:
        await resolver.dispose()


@app.command("default-model")
def default_model_command(
    as_json: bool = typer.Option(False, "--json", help="Print as JSON"),
) -> None:
    """Print the model used when none is specified."""
    try:
        ref = asyncio.run(_default_model())
    except ProviderError as exc:
        output.error(str(exc))
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(ref._asdict()))
    else:
        typer.echo(str(ref))


def main() -> None:
    """Main entry point."""
    load_dotenv()
    app()


if __name__ == "__main__":
    main()
