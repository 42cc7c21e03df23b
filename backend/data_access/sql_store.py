"""
sql_store.py — SQLAlchemy-backed store for local development and tests.
Same tables and upsert semantics as the Supabase schema; rows are filtered
by user_id here because there is no row-level security to do it.
"""

import logging

from sqlalchemy import Date, Integer, delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from data_access.base import BaseStore, DataAccessError, ErrorKind
from models.habit import Habit
from models.habit_log import HabitLog
from models.task import Task
from services.dates import parse_day

logger = logging.getLogger(__name__)

TABLES = {
    "habits": Habit,
    "habit_logs": HabitLog,
    "tasks": Task,
}


def _model_for(table: str):
    model = TABLES.get(table)
    if model is None:
        raise DataAccessError(ErrorKind.VALIDATION, f"Unknown table: {table}")
    return model


def _to_dict(row) -> dict:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


def _coerce(model, record: dict) -> dict:
    """Drop unknown keys; turn ISO strings into dates and numeric ids into ints."""
    columns = model.__table__.columns
    values = {}
    for key, value in record.items():
        if key not in columns:
            continue
        column_type = columns[key].type
        if isinstance(column_type, Date) and isinstance(value, str):
            value = parse_day(value)
        elif isinstance(column_type, Integer) and isinstance(value, str) and value.isdigit():
            value = int(value)
        values[key] = value
    return values


class SqlStore(BaseStore):
    """Store backed by a SQLAlchemy session factory."""

    def __init__(self, user_id: str, session_factory):
        super().__init__(user_id)
        self.session_factory = session_factory

    @property
    def name(self) -> str:
        return "sql"

    def _run(self, operation: str, fn):
        db: Session = self.session_factory()
        try:
            result = fn(db)
            db.commit()
            return result
        except DataAccessError:
            db.rollback()
            raise
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"{operation} violated a constraint: {e.orig}")
            raise DataAccessError(ErrorKind.CONSTRAINT, str(e.orig))
        except OperationalError as e:
            db.rollback()
            logger.error(f"{operation} failed: {e.orig}")
            raise DataAccessError(ErrorKind.CONNECTIVITY, str(e.orig))
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"{operation} failed: {e}")
            raise DataAccessError(ErrorKind.CONNECTIVITY, str(e))
        finally:
            db.close()

    def _owned(self, db: Session, model, record_id):
        try:
            pk = int(record_id)
        except (TypeError, ValueError):
            raise DataAccessError(ErrorKind.NOT_FOUND, f"No row {record_id} in {model.__tablename__}")
        row = db.query(model).filter_by(id=pk, user_id=self.user_id).first()
        if row is None:
            raise DataAccessError(ErrorKind.NOT_FOUND, f"No row {record_id} in {model.__tablename__}")
        return row

    # ------------------------------------------------------------------
    async def list_all(self, table: str, order_by: str, descending: bool = True) -> list[dict]:
        model = _model_for(table)
        column = getattr(model, order_by)

        def fn(db: Session):
            stmt = select(model).where(model.user_id == self.user_id)
            stmt = stmt.order_by(column.desc() if descending else column.asc(), model.id.desc())
            return [_to_dict(row) for row in db.scalars(stmt).all()]

        return self._run(f"list {table}", fn)

    async def insert(self, table: str, record: dict) -> dict:
        model = _model_for(table)

        def fn(db: Session):
            values = _coerce(model, record)
            values["user_id"] = self.user_id
            values.pop("id", None)
            if table == "habit_logs":
                # habit_logs must point at one of this user's habits
                self._owned(db, Habit, values.get("habit_id"))
            row = model(**values)
            db.add(row)
            db.flush()
            db.refresh(row)
            return _to_dict(row)

        return self._run(f"insert {table}", fn)

    async def update(self, table: str, record_id: str, partial: dict) -> dict:
        model = _model_for(table)

        def fn(db: Session):
            row = self._owned(db, model, record_id)
            for key, value in _coerce(model, partial).items():
                if key in ("id", "user_id"):
                    continue
                setattr(row, key, value)
            db.flush()
            db.refresh(row)
            return _to_dict(row)

        return self._run(f"update {table}", fn)

    async def delete(self, table: str, record_id: str) -> None:
        model = _model_for(table)

        def fn(db: Session):
            row = self._owned(db, model, record_id)
            db.execute(delete(model).where(model.id == row.id))

        self._run(f"delete {table}", fn)

    async def upsert(self, table: str, record: dict, on_conflict: tuple[str, ...]) -> dict:
        model = _model_for(table)

        def fn(db: Session):
            values = _coerce(model, record)
            values["user_id"] = self.user_id
            values.pop("id", None)
            if table == "habit_logs":
                self._owned(db, Habit, values.get("habit_id"))

            dialect = db.get_bind().dialect.name
            if dialect == "sqlite":
                insert_fn = sqlite.insert
            elif dialect == "postgresql":
                insert_fn = postgresql.insert
            else:
                raise DataAccessError(ErrorKind.VALIDATION, f"Upsert not supported on {dialect}")

            updates = {k: v for k, v in values.items() if k not in on_conflict}
            stmt = insert_fn(model).values(**values).on_conflict_do_update(
                index_elements=list(on_conflict), set_=updates
            )
            db.execute(stmt)

            key = {col: values[col] for col in on_conflict}
            row = db.query(model).filter_by(**key).one()
            return _to_dict(row)

        return self._run(f"upsert {table}", fn)
