from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, TypeVar

import typer

from augurk_expiration.db.provider import DocumentStoreProvider
from augurk_expiration.exceptions import AugurkError

T = TypeVar("T")


def build_provider() -> DocumentStoreProvider:
    """Provider for CLI commands; tests replace this to inject a store."""
    return DocumentStoreProvider()


@asynccontextmanager
async def open_provider() -> AsyncIterator[DocumentStoreProvider]:
    provider = build_provider()
    await provider.initialize()
    try:
        yield provider
    finally:
        await provider.dispose()


def run(coro: Awaitable[T]) -> T:
    """Run a command coroutine, turning AugurkError into exit code 1."""
    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except AugurkError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
