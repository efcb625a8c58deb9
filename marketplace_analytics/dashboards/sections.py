"""
Dashboard Section Runner

Each dashboard section is computed independently and concurrently. A
section either yields its full result or, if any of its fetches fails, its
zero value; partial results are never surfaced. Cancellation is not
absorbed.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generator, Generic, List, Optional, Sequence, TypeVar

import structlog

from marketplace_analytics.errors import ClientError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Section(Generic[T]):
    name: str
    load: Callable[[], Awaitable[T]]
    empty: Callable[[], T]


class SharedFetch(Generic[T]):
    """
    A fetch started on first await and shared by every section awaiting it.

    A failure is seen by every consumer, each of which degrades on its own.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]):
        self._factory = factory
        self._task: Optional["asyncio.Future[T]"] = None

    def __await__(self) -> Generator[Any, None, T]:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        return self._task.__await__()

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()


async def run_section(dashboard: str, section: Section[T]) -> T:
    try:
        return await section.load()
    except ClientError:
        raise
    except Exception as e:
        logger.error(
            "Dashboard section failed, returning empty section",
            dashboard=dashboard,
            section=section.name,
            error=str(e),
            error_type=type(e).__name__,
        )
        return section.empty()


async def gather_or_cancel(*awaitables: Awaitable[Any]) -> List[Any]:
    """
    Await concurrently, results in argument order.

    If one of them raises, the ones still running are cancelled and awaited
    before the error propagates, so none outlives the call.
    """
    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


async def gather_sections(
    dashboard: str,
    sections: Sequence[Section[Any]],
    shared: Sequence[SharedFetch[Any]] = (),
) -> List[Any]:
    """Run sections concurrently; results come back in section order."""
    try:
        return await gather_or_cancel(*(run_section(dashboard, section) for section in sections))
    finally:
        for fetch in shared:
            fetch.cancel()


async def assemble(dashboard: str, build: Callable[[], Awaitable[T]], empty: Callable[[], T]) -> T:
    """
    Build a whole read-model, falling back to its zero value on failure.

    Client errors still propagate so the caller can reject the request.
    """
    try:
        return await build()
    except ClientError:
        raise
    except Exception as e:
        logger.error(
            "Dashboard assembly failed, returning empty dashboard",
            dashboard=dashboard,
            error=str(e),
            error_type=type(e).__name__,
        )
        return empty()
