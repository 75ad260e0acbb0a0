# inventory/data/invalidation.py
import asyncio
import threading
from typing import Iterable

from sqlalchemy import event, Insert, Update, Delete
from sqlalchemy.orm import Session, sessionmaker

from inventory.utils.logging import get_logger

logger = get_logger(__name__)

_PENDING_KEY = "invalidated_tables"


class TableObserver:
    """
    One LiveQuery subscription: the tables it reads and an Event on its loop.
    The event starts set so the current snapshot is emitted right away.
    """

    def __init__(self, tables: Iterable[str], loop: asyncio.AbstractEventLoop):
        self.tables = frozenset(tables)
        self.loop = loop
        self._event = asyncio.Event()
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()
        self._event.clear()

    def _signal(self) -> None:
        self._event.set()


class InvalidationTracker:
    """
    Collects tables written inside a session and wakes observers after commit.

    Notifications are always scheduled on the observer's own loop, never run
    inside the writing call.
    """

    def __init__(self, name: str):
        self.name = name
        self._observers: set[TableObserver] = set()
        self._lock = threading.Lock()

    # =====================================================
    # OBSERVERS
    # =====================================================
    def add_observer(self, tables: Iterable[str]) -> TableObserver:
        observer = TableObserver(tables, asyncio.get_running_loop())
        with self._lock:
            self._observers.add(observer)
        logger.debug(f"[{self.name}] observer added for {sorted(observer.tables)}")
        return observer

    def remove_observer(self, observer: TableObserver) -> None:
        with self._lock:
            self._observers.discard(observer)
        logger.debug(f"[{self.name}] observer removed for {sorted(observer.tables)}")

    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def notify(self, tables: Iterable[str]) -> None:
        changed = set(tables)
        if not changed:
            return
        with self._lock:
            targets = [o for o in self._observers if o.tables & changed]
        self._wake(targets)

    def notify_all(self) -> None:
        with self._lock:
            targets = list(self._observers)
        self._wake(targets)

    def _wake(self, targets: list[TableObserver]) -> None:
        for observer in targets:
            if observer.loop.is_closed():
                # subscriber abandoned together with its loop
                self.remove_observer(observer)
                continue
            observer.loop.call_soon_threadsafe(observer._signal)

    # =====================================================
    # SESSION HOOKS
    # =====================================================
    def install(self, session_factory: sessionmaker) -> None:
        event.listen(session_factory, "do_orm_execute", self._on_execute)
        event.listen(session_factory, "after_commit", self._on_commit)
        event.listen(session_factory, "after_rollback", self._on_rollback)

    @staticmethod
    def _pending(session: Session) -> set[str]:
        return session.info.setdefault(_PENDING_KEY, set())

    def _on_execute(self, orm_execute_state) -> None:
        statement = orm_execute_state.statement
        if isinstance(statement, (Insert, Update, Delete)):
            self._pending(orm_execute_state.session).add(statement.table.name)

    def _on_commit(self, session: Session) -> None:
        tables = session.info.pop(_PENDING_KEY, set())
        if tables:
            logger.debug(f"[{self.name}] invalidated {sorted(tables)}")
            self.notify(tables)

    def _on_rollback(self, session: Session) -> None:
        session.info.pop(_PENDING_KEY, None)
