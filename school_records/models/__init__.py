# school_records/models/__init__.py
"""Import all models here, if needed for Alembic migration."""
from .base import Base
from .record import RecordRow
