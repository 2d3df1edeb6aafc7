"""CLI entry point for docweave."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from docweave.codecs import CODECS, EncodeOnlyCodec
from docweave.config import DocweaveConfig, load_config, set_config
from docweave.config.loader import DEFAULT_CONFIG_TEMPLATE
from docweave.errors import DocweaveError

app = typer.Typer(
    name="docweave",
    help="Convert documents between formats through one canonical document tree.",
)

config_app = typer.Typer(help="Manage docweave configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: DocweaveConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _get_config() -> DocweaveConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to docweave.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    set_config(_config)
    logging.basicConfig(
        level=_LOG_LEVELS[_config.log_level],
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def convert(
    input: str = typer.Argument(..., help="File, directory or content to convert"),
    output: str | None = typer.Argument(None, help="Where to write; prints to stdout if omitted"),
    from_format: str | None = typer.Option(None, "--from", "-f", help="Format of the input"),
    to_format: str | None = typer.Option(None, "--to", "-t", help="Format of the output"),
) -> None:
    """Convert a document from one format to another."""
    from docweave.browser import get_pool
    from docweave.registry import convert as run_convert

    async def _run() -> str | None:
        try:
            return await run_convert(input, output, from_format, to_format)
        finally:
            await get_pool().shutdown()

    try:
        result = asyncio.run(_run())
    except DocweaveError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if output:
        rprint(f"[green]Written to[/green] {result}")
    else:
        typer.echo(result)


@app.command()
def formats() -> None:
    """List the registered codecs in resolution order."""
    table = Table(title=f"Codecs ({len(CODECS)})")
    table.add_column("Name", style="cyan")
    table.add_column("Extensions", style="green")
    table.add_column("Media types", style="yellow")
    table.add_column("Decode", justify="center")
    for codec in CODECS:
        can_decode = "no" if isinstance(codec, EncodeOnlyCodec) else "yes"
        table.add_row(
            codec.name,
            ", ".join(codec.ext_names) or "-",
            ", ".join(codec.media_types) or "-",
            can_decode,
        )
    rprint(table)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    import yaml

    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default docweave.yaml in current directory."""
    target = Path("docweave.yaml")
    if target.exists() and not force:
        rprint("[yellow]docweave.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
