"""
Shared pytest fixtures for the Campus Grievance Desk test suite.

Provides an httpx AsyncClient bound to the in-process app, an in-memory
mongomock database injected through the get_db dependency, factories for
users and grievances, and auth headers for each role.
"""

import os
import sys
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

# JWT_SECRET is checked at import time
os.environ.setdefault("JWT_SECRET", "test-only-secret-0123456789abcdefghijklmnopqrstuvwxyz")

import httpx
import mongomock
import pytest
import pytest_asyncio

# Ensure the project modules are importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from grievance_desk import app, get_db, limiter, create_access_token, hash_password

TEST_PASSWORD = "secret123"


@lru_cache(maxsize=1)
def _test_password_hash() -> str:
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def db():
    """Fresh in-memory database per test."""
    return mongomock.MongoClient(tz_aware=True).grievance_desk


@pytest_asyncio.fixture
async def client(db):
    """In-process httpx AsyncClient with the mongomock database injected."""
    # Disable rate limiting so repeated logins aren't throttled
    limiter.enabled = False
    app.dependency_overrides[get_db] = lambda: db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(role: str, name: str = None, department: str = None, **extra) -> dict:
        uid = str(uuid.uuid4())
        doc = {
            "_id": uid,
            "name": name or f"{role.title()} {uid[:6]}",
            "email": extra.pop("email", f"{role}_{uid[:8]}@campus.edu"),
            "hashed_password": _test_password_hash(),
            "role": role,
            "department": department,
            "registration_number": extra.pop("registration_number", None),
            "program": extra.pop("program", None),
            "created_at": datetime.now(timezone.utc),
        }
        doc.update(extra)
        db.users.insert_one(doc)
        return doc
    return _make


@pytest.fixture
def make_grievance(db):
    def _make(student: dict, department: str = "Computer Science", status: str = "open",
              created_at: datetime = None, assigned_to: dict = None, title: str = None) -> dict:
        created_at = created_at or datetime.now(timezone.utc)
        gid = str(uuid.uuid4())
        doc = {
            "_id": gid,
            "title": title or f"Grievance {gid[:6]}",
            "description": "Filed from the test suite.",
            "department": department,
            "status": status,
            "student": student["_id"],
            "assigned_to": assigned_to["_id"] if assigned_to else None,
            "resolution": None,
            "resolved_at": None,
            "assignment_history": [],
            "created_at": created_at,
            "updated_at": created_at,
        }
        db.grievances.insert_one(doc)
        return doc
    return _make


def auth_headers(user: dict) -> dict:
    token = create_access_token({"sub": user["_id"], "role": user["role"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(make_user):
    return make_user("admin", name="Grievance Admin")


@pytest.fixture
def faculty(make_user):
    return make_user("faculty", name="Dr. Ananya Rao", department="Computer Science")


@pytest.fixture
def other_faculty(make_user):
    return make_user("faculty", name="Dr. Vikram Joshi", department="Electrical")


@pytest.fixture
def student(make_user):
    return make_user("student", name="Aarav Mehta", department="Computer Science",
                     registration_number="CS21B014", program="B.Tech")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def faculty_headers(faculty):
    return auth_headers(faculty)


@pytest.fixture
def student_headers(student):
    return auth_headers(student)


def utc(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)
