from sqlalchemy.orm import as_declarative, declared_attr
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import DateTime, String, func
import uuid


def new_record_id() -> str:
    return str(uuid.uuid4())


@as_declarative()
class Base:
    __abstract__ = True  # Prevents creating a table for the base class

    id: Mapped[str]

    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

    # String UUIDs keep the identifier portable across PostgreSQL and SQLite
    id = mapped_column(String(36), primary_key=True, index=True, default=new_record_id)
    created_at = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
