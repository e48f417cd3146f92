"""Selection of the result store backend."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from a11y_orchestrator.store.base import ResultStore
from a11y_orchestrator.store.memory import MemoryResultStore
from a11y_orchestrator.store.sql import SqlResultStore


@asynccontextmanager
async def open_result_store(database_url: str | None) -> AsyncGenerator[ResultStore, None]:
    """Open a SQL store for ``database_url`` or an in-memory store without one."""
    if database_url is None:
        yield MemoryResultStore()
        return

    async with SqlResultStore.from_url(database_url) as store:
        yield store
