from __future__ import annotations

import asyncio
import signal
from contextlib import suppress
from typing import Optional

import typer

from augurk_expiration.cli import context
from augurk_expiration.jobs.expiration import register_expiration_jobs
from augurk_expiration.jobs.scheduler import InMemoryScheduler

app = typer.Typer(no_args_is_help=True, help="Background job commands")


@app.command("run")
def run_jobs(
    max_loops: Optional[int] = typer.Option(None, help="Stop after this many scheduler loops."),
    interval: Optional[int] = typer.Option(
        None, help="Seconds between policy passes; defaults to EXPIRATION_INTERVAL_SECONDS."
    ),
    tick: float = typer.Option(60.0, help="Seconds between scheduler ticks."),
):
    """Apply the policy and purge expired documents on an interval."""

    async def _run() -> None:
        async with context.open_provider() as provider:
            scheduler = InMemoryScheduler(tick_interval=tick)
            register_expiration_jobs(scheduler, provider, interval_seconds=interval)
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                # unsupported on Windows loops and outside the main thread
                with suppress(NotImplementedError, RuntimeError):
                    loop.add_signal_handler(sig, scheduler.stop)
            await scheduler.run(max_loops=max_loops)

    context.run(_run())


def register(app_root: typer.Typer) -> None:
    app_root.add_typer(app, name="jobs")
