# inventory/data/live_query.py
from typing import AsyncIterator, Callable, Generic, Iterable, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")


class LiveQuery(Generic[T]):
    """
    Reactive query over one or more tables.

    Every ``async for`` is a separate subscription: the current snapshot is
    emitted first, then a fresh one after each committed change to the
    observed tables. The stream never ends on its own; leave the loop (or
    ``aclose()`` the iterator) to unsubscribe.

        async for products in repo.get_all():
            render(products)
    """

    def __init__(self, database, tables: Iterable[str], query: Callable[[Session], T]):
        self._database = database
        self._tables = frozenset(tables)
        self._query = query

    @property
    def tables(self) -> frozenset[str]:
        return self._tables

    def __aiter__(self) -> AsyncIterator[T]:
        return self._subscribe()

    async def _subscribe(self) -> AsyncIterator[T]:
        tracker = self._database.invalidation_tracker
        observer = tracker.add_observer(self._tables)
        try:
            while True:
                await observer.wait()
                yield await self._database.run(self._query)
        finally:
            tracker.remove_observer(observer)

    async def first(self) -> T:
        """Current snapshot; the subscription is closed right after."""
        stream = self._subscribe()
        try:
            return await stream.__anext__()
        finally:
            await stream.aclose()
