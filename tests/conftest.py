# tests/conftest.py
import os

# Settings are read at import time; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_school_records.db")

import pytest

from school_records.services.admission_service import AdmissionService
from school_records.services.conflict_guard import ConflictGuard
from school_records.services.marks_service import MarksService
from school_records.services.staff_service import StaffService
from school_records.services.student_service import StudentService
from school_records.store.memory import InMemoryRecordStore


@pytest.fixture
def store():
    """A fresh, empty in-memory record store for each test."""
    return InMemoryRecordStore()


@pytest.fixture
def guard():
    return ConflictGuard(shards=8)


@pytest.fixture
def students(store, guard):
    return StudentService(store, guard)


@pytest.fixture
def staff(store, guard):
    return StaffService(store, guard)


@pytest.fixture
def marks(store, guard):
    return MarksService(store, guard)


@pytest.fixture
def admissions(store, guard):
    return AdmissionService(store, guard)
