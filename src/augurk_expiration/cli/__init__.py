from __future__ import annotations

import typer

from augurk_expiration.app.core.logging import setup_logging

from .cmds import register_config, register_expiration, register_jobs

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Augurk document expiration tooling.",
)


@app.callback()
def _configure() -> None:
    setup_logging()


register_expiration(app)
register_config(app)
register_jobs(app)


def main() -> None:
    app()


__all__ = ["app", "main"]
