"""Tests for the database containers' process-wide lifecycle.

These tests verify:
- get_database hands every caller (and every thread) the same instance
- Reference counting, explicit and idempotent close
- Re-initialization after close, including a last release racing a new access
- INITIALIZING is visible while the instance is being built
- File persistence across instances
- StorageInitError on corrupt files and schema mismatches
"""

import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from inventory.data import CartDatabase, DatabaseState, InventoryDatabase, StorageContext
from inventory.domain.errors import StorageInitError
from inventory.domain.schemas import OnConflict, Product


class TestSingleton:
    """Construct-once registry per container type."""

    def test_uninitialized_before_first_access(self):
        assert InventoryDatabase.current_state() == DatabaseState.UNINITIALIZED

    def test_same_instance_for_every_caller(self, storage_context):
        first = InventoryDatabase.get_database(storage_context)
        second = InventoryDatabase.get_database(storage_context)

        assert first is second
        assert first.ref_count == 2
        assert InventoryDatabase.current_state() == DatabaseState.READY

    def test_repo_is_shared(self, storage_context):
        db = InventoryDatabase.get_database(storage_context)

        assert db.product_repo() is db.product_repo()

    def test_concurrent_access_constructs_once(self, storage_context, monkeypatch):
        constructed = []
        original_init = InventoryDatabase.__init__

        def counting_init(self, *args, **kwargs):
            constructed.append(self)
            original_init(self, *args, **kwargs)

        monkeypatch.setattr(InventoryDatabase, "__init__", counting_init)

        workers = 8
        barrier = threading.Barrier(workers)

        def access():
            barrier.wait()
            return InventoryDatabase.get_database(storage_context)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: access(), range(workers)))

        assert len(constructed) == 1
        assert all(db is results[0] for db in results)
        assert results[0].ref_count == workers

    def test_initializing_visible_during_construction(self, storage_context, monkeypatch):
        observed = []
        original_init = InventoryDatabase.__init__

        def observing_init(self, *args, **kwargs):
            observed.append(InventoryDatabase.current_state())
            original_init(self, *args, **kwargs)

        monkeypatch.setattr(InventoryDatabase, "__init__", observing_init)

        InventoryDatabase.get_database(storage_context)

        assert observed == [DatabaseState.INITIALIZING]
        assert InventoryDatabase.current_state() == DatabaseState.READY

    def test_failed_construction_clears_initializing(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")

        with pytest.raises(StorageInitError):
            InventoryDatabase.get_database(StorageContext(blocker / "data"))

        assert InventoryDatabase.current_state() == DatabaseState.UNINITIALIZED

    def test_container_types_are_separate(self, storage_context):
        inventory = InventoryDatabase.get_database(storage_context)
        cart = CartDatabase.get_database(storage_context)

        assert inventory is not cart
        assert (storage_context.data_dir / "inventory_database.sqlite3").exists()
        assert (storage_context.data_dir / "cart_database.sqlite3").exists()

    def test_in_memory_is_not_registered(self):
        db = InventoryDatabase.in_memory()
        try:
            assert InventoryDatabase.current_state() == DatabaseState.UNINITIALIZED
        finally:
            db.close()

    def test_conflict_policy_from_argument(self, storage_context):
        db = InventoryDatabase.get_database(storage_context, on_conflict=OnConflict.IGNORE)

        assert db.on_conflict == OnConflict.IGNORE
        assert db.product_repo().on_conflict == OnConflict.IGNORE


class TestTeardown:
    """Release, close and re-initialization."""

    def test_release_closes_at_zero(self, storage_context):
        first = InventoryDatabase.get_database(storage_context)
        InventoryDatabase.get_database(storage_context)

        first.release()
        assert first.state == DatabaseState.READY

        first.release()
        assert first.state == DatabaseState.CLOSED

    def test_close_is_idempotent(self, storage_context):
        db = InventoryDatabase.get_database(storage_context)

        db.close()
        db.close()

        assert db.state == DatabaseState.CLOSED
        assert not db.is_open
        assert InventoryDatabase.current_state() == DatabaseState.CLOSED

    def test_access_after_close_builds_new_instance(self, storage_context):
        old = InventoryDatabase.get_database(storage_context)
        old.close()

        new = InventoryDatabase.get_database(storage_context)

        assert new is not old
        assert new.state == DatabaseState.READY

    def test_last_release_racing_access_yields_fresh_instance(self, storage_context, monkeypatch):
        holder = InventoryDatabase.get_database(storage_context)
        original_is_open = InventoryDatabase.is_open
        calls = []

        def releasing_is_open(self):
            # the holder lets go between the unlocked check and the lock
            if not calls:
                calls.append(self)
                holder.release()
            return original_is_open.fget(self)

        monkeypatch.setattr(InventoryDatabase, "is_open", property(releasing_is_open))

        db = InventoryDatabase.get_database(storage_context)

        assert db is not holder
        assert holder.state == DatabaseState.CLOSED
        assert db.state == DatabaseState.READY
        assert db.ref_count == 1

    def test_closing_instance_is_not_handed_out(self, storage_context, monkeypatch):
        holder = InventoryDatabase.get_database(storage_context)
        original_close = InventoryDatabase.close
        deferred = []
        monkeypatch.setattr(InventoryDatabase, "close", lambda self: deferred.append(self))

        holder.release()
        assert deferred == [holder]
        assert holder.state == DatabaseState.READY
        assert not holder.is_open

        db = InventoryDatabase.get_database(storage_context)
        try:
            assert db is not holder
            assert db.ref_count == 1
            assert holder.ref_count == 0
        finally:
            original_close(holder)

    def test_context_manager_releases(self, storage_context):
        with InventoryDatabase.get_database(storage_context) as db:
            assert db.is_open

        assert db.state == DatabaseState.CLOSED

    @pytest.mark.asyncio
    async def test_rows_persist_across_instances(self, storage_context):
        product = Product(id=1, name="Apples", price=1.0, category="fruit")

        db = InventoryDatabase.get_database(storage_context)
        await db.product_repo().insert(product)
        db.close()

        reopened = InventoryDatabase.get_database(storage_context)
        assert await reopened.product_repo().get_all().first() == [product]


class TestInitFailures:
    """Construction failures surface synchronously as StorageInitError."""

    def test_corrupt_file(self, storage_context):
        path = storage_context.database_path(InventoryDatabase.name)
        path.write_bytes(b"this is not a sqlite database file" * 20)

        with pytest.raises(StorageInitError):
            InventoryDatabase.get_database(storage_context)

        assert InventoryDatabase.current_state() == DatabaseState.UNINITIALIZED

    def test_schema_mismatch(self, storage_context):
        path = storage_context.database_path(InventoryDatabase.name)
        with sqlite3.connect(path) as conn:
            conn.execute("CREATE TABLE products (id INTEGER PRIMARY KEY, title TEXT)")

        with pytest.raises(StorageInitError, match="columns"):
            InventoryDatabase.get_database(storage_context)

    def test_newer_schema_version(self, storage_context):
        path = storage_context.database_path(InventoryDatabase.name)
        with sqlite3.connect(path) as conn:
            conn.execute("PRAGMA user_version = 7")

        with pytest.raises(StorageInitError, match="version"):
            InventoryDatabase.get_database(storage_context)

    def test_fresh_file_is_stamped_with_version(self, storage_context):
        db = InventoryDatabase.get_database(storage_context)
        db.close()

        path = storage_context.database_path(InventoryDatabase.name)
        conn = sqlite3.connect(path)
        try:
            version = conn.execute("PRAGMA user_version").fetchone()[0]
        finally:
            conn.close()
        assert version == InventoryDatabase.VERSION

    def test_unusable_data_dir(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")

        with pytest.raises(StorageInitError):
            InventoryDatabase.get_database(StorageContext(blocker / "data"))
