from __future__ import annotations

import json
from typing import Optional

import typer
from pydantic import ValidationError

from augurk_expiration.cli import context
from augurk_expiration.configuration.manager import ConfigurationManager
from augurk_expiration.db.health import store_healthcheck
from augurk_expiration.expiration.manager import ExpirationManager


def apply(
    enabled: Optional[bool] = typer.Option(
        None, "--enabled/--disabled", help="Override ExpirationEnabled for this run."
    ),
    days: Optional[int] = typer.Option(None, min=0, help="Override ExpirationDays for this run."),
    regex: Optional[str] = typer.Option(None, help="Override ExpirationRegex for this run."),
):
    """Apply the expiration policy to every versioned document."""

    async def _apply() -> dict[str, int]:
        async with context.open_provider() as provider:
            configuration = await ConfigurationManager(provider).get_or_create_configuration()
            overrides = {
                k: v
                for k, v in {
                    "expiration_enabled": enabled,
                    "expiration_days": days,
                    "expiration_regex": regex,
                }.items()
                if v is not None
            }
            if overrides:
                # model_validate so an invalid --regex is rejected like a stored one
                configuration = configuration.model_validate(
                    {**configuration.model_dump(), **overrides}
                )
            report = await ExpirationManager(provider).apply_expiration_policy(configuration)
            return report.as_dict()

    try:
        summary = context.run(_apply())
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps(summary))


def purge():
    """Delete documents whose expiration date has passed."""

    async def _purge() -> int:
        async with context.open_provider() as provider:
            return await provider.store.purge_expired()

    deleted = context.run(_purge())
    typer.echo(f"Purged {deleted} expired document(s)")


def health():
    """Exit non-zero when the document store is unreachable."""

    async def _health() -> bool:
        async with context.open_provider() as provider:
            return await store_healthcheck(provider.store)

    if not context.run(_health()):
        typer.echo("Document store is unhealthy", err=True)
        raise typer.Exit(code=1)
    typer.echo("ok")


def register(app_root: typer.Typer) -> None:
    app_root.command("apply")(apply)
    app_root.command("purge")(purge)
    app_root.command("health")(health)
