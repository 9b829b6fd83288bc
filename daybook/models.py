# daybook/models.py
from sqlalchemy import Column, Integer, String, JSON, DateTime, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

Base = declarative_base()


class Record(Base):
    """One stored entity. Every collection (habits, todos, ...) shares this table."""
    __tablename__ = "records"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String, nullable=False)
    position   = Column(Integer, nullable=False)       # keeps insertion order
    payload    = Column(JSON, nullable=False)
    written_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_records_collection_position", "collection", "position"),
    )
