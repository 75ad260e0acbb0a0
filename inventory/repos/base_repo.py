# inventory/repos/base_repo.py
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select, update, delete
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from inventory.data.live_query import LiveQuery
from inventory.domain.schemas import OnConflict
from inventory.utils.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=BaseModel)


class BaseRepo(Generic[E]):
    """
    CRUD + reactive queries for one table.

    Writes are awaited until committed; observers of the table are told
    afterwards. update/delete on a missing key affect 0 rows and are not errors.
    """

    model = None
    entity: type[BaseModel] = BaseModel

    def __init__(self, database, on_conflict: OnConflict):
        self.database = database
        self.on_conflict = on_conflict
        self.table_name = self.model.__tablename__

    # =====================================================
    # COMMANDS
    # =====================================================
    async def insert(self, record: E) -> None:
        stmt = self._insert_statement(record)
        rowcount = await self.database.run(lambda db: db.execute(stmt).rowcount, shield=True)
        logger.debug(f"[{self.table_name}] insert id={record.id} rows={rowcount} ({self.on_conflict.value})")

    async def update(self, record: E) -> int:
        """Replace every non-key column of the row with ``record.id``; returns rows affected."""
        values = record.model_dump(exclude={"id"})
        stmt = (
            update(self.model)
            .where(self.model.id == record.id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        rowcount = await self.database.run(lambda db: db.execute(stmt).rowcount, shield=True)
        logger.debug(f"[{self.table_name}] update id={record.id} rows={rowcount}")
        return rowcount

    async def delete(self, record: E) -> int:
        return await self.delete_by_id(record.id)

    async def delete_by_id(self, record_id: int) -> int:
        stmt = (
            delete(self.model)
            .where(self.model.id == record_id)
            .execution_options(synchronize_session=False)
        )
        rowcount = await self.database.run(lambda db: db.execute(stmt).rowcount, shield=True)
        logger.debug(f"[{self.table_name}] delete id={record_id} rows={rowcount}")
        return rowcount

    # =====================================================
    # QUERIES
    # =====================================================
    def get_all(self) -> LiveQuery[list[E]]:
        """All rows ordered by id, re-emitted on every change."""
        return LiveQuery(self.database, [self.table_name], self._select_all)

    def get_by_id(self, record_id: int) -> LiveQuery[E | None]:
        """The row with ``record_id`` or None, re-emitted on every change."""
        return LiveQuery(self.database, [self.table_name], lambda db: self._select_one(db, record_id))

    def _select_all(self, db: Session) -> list[E]:
        rows = db.scalars(select(self.model).order_by(self.model.id)).all()
        return [self.entity.model_validate(row) for row in rows]

    def _select_one(self, db: Session, record_id: int) -> E | None:
        row = db.get(self.model, record_id)
        return self.entity.model_validate(row) if row is not None else None

    def _insert_statement(self, record: E):
        stmt = insert(self.model).values(**record.model_dump())
        if self.on_conflict == OnConflict.IGNORE:
            return stmt.on_conflict_do_nothing(index_elements=[self.model.id])
        if self.on_conflict == OnConflict.REPLACE:
            columns = {
                c.name: getattr(stmt.excluded, c.name)
                for c in self.model.__table__.columns
                if not c.primary_key
            }
            return stmt.on_conflict_do_update(index_elements=[self.model.id], set_=columns)
        return stmt
