# school_records/models/record.py
from sqlalchemy import Column, String, JSON, Index
from .base import Base

class RecordRow(Base):
    """One document of any collection; the free-form body lives in ``data``."""
    __tablename__ = "records"

    collection = Column(String(50), nullable=False, index=True)
    data = Column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_records_collection_created", "collection", "created_at"),
    )
