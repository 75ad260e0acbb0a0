# inventory/data/database.py
"""
Shared declarative base and the database container every store builds on.

A container owns exactly one engine (one SQLite file) and one worker thread.
``get_database`` is the only way to reach the process-wide instance; it is
built once under a lock and handed out with a reference count.
"""
import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from enum import Enum
from typing import Callable, ClassVar, Iterator, TypeVar

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from inventory.data.context import StorageContext
from inventory.data.invalidation import InvalidationTracker
from inventory.domain.errors import ConstraintViolation, StorageError, StorageInitError
from inventory.domain.schemas import OnConflict
from inventory.utils.settings import ON_CONFLICT, SQLITE_TIMEOUT, SQL_ECHO
from inventory.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

T = TypeVar("T")


class DatabaseState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZING = "INITIALIZING"
    READY = "READY"
    CLOSED = "CLOSED"


class StoreDatabase:
    """
    Base container: engine, session factory, invalidation tracker, lifecycle.

    Subclasses set ``name`` (storage file name), ``VERSION`` and ``tables``,
    and build their repos in ``_create_repos``.
    """

    name: ClassVar[str] = ""
    VERSION: ClassVar[int] = 1
    tables: ClassVar[tuple] = ()

    _instance: ClassVar["StoreDatabase | None"] = None
    _initializing: ClassVar[bool] = False
    _lock: ClassVar[threading.Lock]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # one registry slot per container type
        cls._instance = None
        cls._initializing = False
        cls._lock = threading.Lock()

    def __init__(self, url: str, *, on_conflict: OnConflict | str | None = None, in_memory: bool = False):
        self.state = DatabaseState.INITIALIZING
        self.url = url
        self.on_conflict = OnConflict.parse(on_conflict if on_conflict is not None else ON_CONFLICT)
        self._refs = 0
        self._closing = False
        self._close_lock = threading.Lock()

        engine_kwargs = {
            "echo": SQL_ECHO,
            "connect_args": {
                "check_same_thread": False,
                "timeout": SQLITE_TIMEOUT,
            },
        }
        if in_memory:
            # single shared connection, otherwise every connection sees an empty database
            engine_kwargs["poolclass"] = StaticPool

        try:
            self._engine: Engine = create_engine(url, **engine_kwargs)
            self._ensure_schema()
        except StorageInitError:
            self._dispose_quietly()
            raise
        except (SQLAlchemyError, OSError) as e:
            self._dispose_quietly()
            logger.error(f"Failed to open {self.name} at {url}: {e}")
            raise StorageInitError(f"Cannot open {self.name}: {e}") from e

        self.SessionLocal = sessionmaker(bind=self._engine, expire_on_commit=False, autoflush=True)
        self.invalidation_tracker = InvalidationTracker(self.name)
        self.invalidation_tracker.install(self.SessionLocal)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self.name}-io")
        self._create_repos()

        self.state = DatabaseState.READY
        logger.info(f"{self.name} ready ({url}, on_conflict={self.on_conflict.value})")

    # =====================================================
    # BUILDERS
    # =====================================================
    @classmethod
    def get_database(cls, context: StorageContext | None = None, *, on_conflict: OnConflict | str | None = None):
        """
        Process-wide instance for this container type.

        Double-checked: existence is tested, the lock taken, existence tested
        again, and only then is the instance built, so exactly one caller
        constructs and every caller gets that same object. The re-check and
        the reference increment share one critical section, so a handle that
        ``release`` is closing is never handed out; it is replaced instead.
        """
        instance = cls._instance
        seen_open = instance is not None and instance.is_open
        with cls._lock:
            instance = cls._instance
            if instance is None or not instance.is_open:
                if seen_open:
                    logger.debug(f"{cls.name} closed while waiting for the lock, rebuilding")
                cls._initializing = True
                try:
                    instance = cls._construct(context, on_conflict)
                finally:
                    cls._initializing = False
                cls._instance = instance
            instance._refs += 1
            return instance

    @classmethod
    def _construct(cls, context: StorageContext | None, on_conflict):
        context = context or StorageContext.from_settings()
        try:
            path = context.database_path(cls.name)
        except OSError as e:
            raise StorageInitError(f"Cannot prepare storage for {cls.name}: {e}") from e
        logger.info(f"Initializing {cls.name} at {path}")
        return cls(f"sqlite:///{path}", on_conflict=on_conflict)

    @classmethod
    def in_memory(cls, *, on_conflict: OnConflict | str | None = None):
        """Private in-memory instance, not registered as the process-wide one."""
        return cls("sqlite://", on_conflict=on_conflict, in_memory=True)

    @classmethod
    def current_state(cls) -> DatabaseState:
        if cls._initializing:
            return DatabaseState.INITIALIZING
        instance = cls._instance
        if instance is None:
            return DatabaseState.UNINITIALIZED
        return instance.state

    @classmethod
    def _reset_instance(cls) -> None:
        """Close and forget the registered instance (test harness helper)."""
        with cls._lock:
            instance, cls._instance = cls._instance, None
        if instance is not None:
            instance.close()

    # =====================================================
    # LIFECYCLE
    # =====================================================
    @property
    def is_open(self) -> bool:
        return self.state == DatabaseState.READY and not self._closing

    @property
    def ref_count(self) -> int:
        return self._refs

    def release(self) -> None:
        """Drop one reference; the handle closes when nobody holds it."""
        with type(self)._lock:
            if self._refs > 0:
                self._refs -= 1
            if self._refs == 0:
                # get_database stops handing this instance out from here on
                self._closing = True
        if self._closing:
            self.close()

    def close(self) -> None:
        """Idempotent. Waits for queued work, disposes the engine, wakes subscribers."""
        with self._close_lock:
            if self.state == DatabaseState.CLOSED:
                return
            self.state = DatabaseState.CLOSED
        self._executor.shutdown(wait=True)
        self._engine.dispose()
        self.invalidation_tracker.notify_all()
        logger.info(f"{self.name} closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    def _dispose_quietly(self) -> None:
        engine = getattr(self, "_engine", None)
        if engine is not None:
            engine.dispose()
        self.state = DatabaseState.CLOSED

    def _create_repos(self) -> None:
        raise NotImplementedError

    # =====================================================
    # SCHEMA
    # =====================================================
    def _ensure_schema(self) -> None:
        with self._engine.begin() as conn:
            version = conn.execute(text("PRAGMA user_version")).scalar() or 0
            if version not in (0, self.VERSION):
                raise StorageInitError(
                    f"{self.name} schema version {version} does not match expected {self.VERSION}"
                )
            Base.metadata.create_all(conn, tables=list(self.tables))

            inspector = inspect(conn)
            for table in self.tables:
                expected = {c.name for c in table.columns}
                found = {c["name"] for c in inspector.get_columns(table.name)}
                if expected != found:
                    raise StorageInitError(
                        f"{self.name} table {table.name} has columns {sorted(found)}, expected {sorted(expected)}"
                    )

            if version == 0:
                conn.execute(text(f"PRAGMA user_version = {int(self.VERSION)}"))
        logger.debug(f"{self.name} schema ensured (version {self.VERSION})")

    # =====================================================
    # SESSIONS
    # =====================================================
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Commit on success, rollback on error; storage errors are translated."""
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.error(f"[{self.name}] constraint violated: {e.orig}")
            raise ConstraintViolation(str(e.orig)) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[{self.name}] storage failure: {type(e).__name__}: {e}")
            raise StorageError(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _call(self, fn: Callable[[Session], T]) -> T:
        # work submitted before close() still runs, the engine is disposed after the queue drains
        with self.session_scope() as db:
            return fn(db)

    async def run(self, fn: Callable[[Session], T], *, shield: bool = False) -> T:
        """
        Run ``fn(session)`` on the worker thread inside one transaction.

        With ``shield`` the work runs to completion even if the awaiting task
        is cancelled.
        """
        if self.state != DatabaseState.READY:
            raise StorageError(f"{self.name} is closed")
        try:
            future = self._executor.submit(self._call, fn)
        except RuntimeError as e:
            # executor already shut down
            raise StorageError(f"{self.name} is closed") from e
        wrapped = asyncio.wrap_future(future)
        if shield:
            return await asyncio.shield(wrapped)
        return await wrapped
