from __future__ import annotations

import json
from typing import Optional

import typer
from pydantic import ValidationError

from augurk_expiration.cli import context
from augurk_expiration.configuration.manager import ConfigurationManager
from augurk_expiration.configuration.models import Configuration

app = typer.Typer(no_args_is_help=True, help="Expiration configuration commands")


@app.command("show")
def show():
    """Print the stored configuration, creating it from defaults if needed."""

    async def _show() -> Configuration:
        async with context.open_provider() as provider:
            return await ConfigurationManager(provider).get_or_create_configuration()

    configuration = context.run(_show())
    typer.echo(json.dumps(configuration.to_document()))


@app.command("set")
def set_(
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled", help="ExpirationEnabled."),
    days: Optional[int] = typer.Option(None, help="ExpirationDays."),
    regex: Optional[str] = typer.Option(None, help="ExpirationRegex."),
):
    """Update the stored configuration; unspecified values are kept."""

    async def _set() -> Configuration:
        async with context.open_provider() as provider:
            manager = ConfigurationManager(provider)
            current = await manager.get_or_create_configuration()
            updates = {
                k: v
                for k, v in {
                    "expiration_enabled": enabled,
                    "expiration_days": days,
                    "expiration_regex": regex,
                }.items()
                if v is not None
            }
            updated = Configuration.model_validate({**current.model_dump(), **updates})
            await manager.insert_or_update_configuration(updated)
            return updated

    try:
        configuration = context.run(_set())
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps(configuration.to_document()))


def register(app_root: typer.Typer) -> None:
    app_root.add_typer(app, name="config")
