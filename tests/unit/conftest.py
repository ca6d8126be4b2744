"""
Shared fixtures for unit tests
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from bson import ObjectId

from docdb_demo.config import Settings

BORN = datetime(2020, 1, 1, tzinfo=timezone.utc)


def make_doc(age: int, name: str = "Dupont") -> dict:
    """A stored person document as the driver returns it"""
    return {"_id": ObjectId(), "name": name, "age": age, "dateOfBirth": BORN}


@pytest.fixture
def collection():
    """Collection double"""
    coll = MagicMock()
    coll.full_name = "test.test"
    return coll


@pytest.fixture
def session():
    """Session double that reports an open transaction"""
    s = MagicMock()
    s.in_transaction = True
    return s


@pytest.fixture
def client(session):
    """Client double whose start_session returns the session fixture"""
    c = MagicMock()
    c.start_session.return_value = session
    return c


@pytest.fixture
def settings():
    """Small demo parameters"""
    return Settings(
        mongodb_uri="mongodb://localhost:27017/",
        seed_count=10,
        page_size=3,
        compressors=["zlib"],
    )
