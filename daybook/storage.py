# daybook/storage.py
"""
Record stores: durable key-value storage, one store per entity collection.

A store only knows how to load and save the whole collection as a list of
plain dicts. Repositories do the filtering and merging on top of it and hold
``store.lock`` for the duration of a read/modify/write.
"""
import json
import logging
import os
import threading
from pathlib import Path

from sqlalchemy import create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from daybook.core.exceptions import StorageError
from daybook.models import Base, Record

logger = logging.getLogger("daybook.storage")

COLLECTIONS = ("users", "habits", "habit_completions", "todos", "events")


class RecordStore:
    """Base class. Subclasses implement ``load`` and ``save``."""

    def __init__(self, collection: str):
        self.collection = collection
        self.lock = threading.RLock()

    def load(self) -> list[dict]:
        raise NotImplementedError

    def save(self, records: list[dict]) -> None:
        raise NotImplementedError


class MemoryStore(RecordStore):
    def __init__(self, collection: str, records: list[dict] | None = None):
        super().__init__(collection)
        self._records = [dict(r) for r in records or []]

    def load(self) -> list[dict]:
        return [dict(r) for r in self._records]

    def save(self, records: list[dict]) -> None:
        self._records = [dict(r) for r in records]


class JsonFileStore(RecordStore):
    """
    Stores a collection as ``<data_dir>/<collection>.json`` shaped like
    ``{"<collection>": [...]}``. Writes go to a temp file which then
    replaces the original, so a crash never leaves half a file behind.
    """

    def __init__(self, collection: str, data_dir: str | Path):
        super().__init__(collection)
        self.path = Path(data_dir) / f"{collection}.json"
        self._initialize()

    def _initialize(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self._write([])
        except OSError as e:
            logger.error(f"Could not initialise {self.path}: {e}")
            raise StorageError(self.collection, f"could not initialise {self.path}") from e

    def _write(self, records: list[dict]):
        tmp_path = self.path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump({self.collection: records}, fh, indent=2)
        os.replace(tmp_path, self.path)

    def load(self) -> list[dict]:
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {self.path}: {e}")
            raise StorageError(self.collection, "read failed") from e
        return data.get(self.collection) or []

    def save(self, records: list[dict]) -> None:
        try:
            self._write(records)
        except (OSError, TypeError) as e:
            logger.error(f"Error writing {self.path}: {e}")
            raise StorageError(self.collection, "write failed") from e


class SqlStore(RecordStore):
    """Keeps a collection as rows of the shared ``records`` table."""

    def __init__(self, collection: str, session_factory):
        super().__init__(collection)
        self.session_factory = session_factory

    def load(self) -> list[dict]:
        try:
            with self.session_factory() as db:
                rows = db.execute(
                    select(Record.payload)
                    .where(Record.collection == self.collection)
                    .order_by(Record.position)
                ).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error reading {self.collection}: {e}")
            raise StorageError(self.collection, "read failed") from e
        return [dict(row) for row in rows]

    def save(self, records: list[dict]) -> None:
        db = self.session_factory()
        try:
            db.execute(delete(Record).where(Record.collection == self.collection))
            db.add_all(
                Record(collection=self.collection, position=i, payload=record)
                for i, record in enumerate(records)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error writing {self.collection}: {e}")
            raise StorageError(self.collection, "write failed") from e
        finally:
            db.close()


def create_session_factory(database_url: str):
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, connect_args=connect_args)
    Base.metadata.create_all(bind=engine, checkfirst=True)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def build_stores(backend: str, database_url: str = "", data_dir: str = "") -> dict[str, RecordStore]:
    """Create one store per collection for the configured backend."""
    if backend == "memory":
        return {name: MemoryStore(name) for name in COLLECTIONS}
    if backend == "json":
        return {name: JsonFileStore(name, data_dir) for name in COLLECTIONS}
    if backend == "sql":
        session_factory = create_session_factory(database_url)
        return {name: SqlStore(name, session_factory) for name in COLLECTIONS}
    raise ValueError(f"Unknown storage backend: {backend!r}")
