# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime
from itertools import count
from typing import Any

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import CallerSession, hash_password, make_tokens
from app.db.base import Base
from app.db.session import get_db as app_get_db
from app.main import app as fastapi_app
from app.models import Comment, Report, User, UserRole
from app.schemas.comment import CommentCreate
from app.schemas.report import ReportCreate
from app.services import comments as comment_service
from app.services import reports as report_service

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-battery"

# bcrypt is slow; hash once for every fixture user
_PASSWORD_HASH = hash_password(TEST_PASSWORD)
_EMAIL_COUNTER = count(1)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_db_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_db_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_db] = _get_db_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_db, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    def _make(name: str = "Resident", role: UserRole = UserRole.user, is_active: bool = True) -> User:
        user = User(
            email=f"user{next(_EMAIL_COUNTER)}@example.com",
            name=name,
            hashed_password=_PASSWORD_HASH,
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def owner(make_user) -> User:
    """User who creates reports in most tests."""
    return make_user("Alice Owner")


@pytest.fixture()
def other(make_user) -> User:
    """Ordinary user who owns nothing."""
    return make_user("Bob Other")


@pytest.fixture()
def admin(make_user) -> User:
    return make_user("Ada Admin", role=UserRole.admin)


def session_of(user: User) -> CallerSession:
    return CallerSession.from_user(user)


def auth_headers(user: User) -> dict[str, str]:
    token = make_tokens(user.email, user.role.value)["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def owner_headers(owner: User) -> dict[str, str]:
    return auth_headers(owner)


@pytest.fixture()
def other_headers(other: User) -> dict[str, str]:
    return auth_headers(other)


@pytest.fixture()
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture()
def make_report(db_session: Session, owner: User) -> Callable[..., Report]:
    def _make(by: User | None = None, **fields: Any) -> Report:
        data = {
            "title": "Pothole on Main St",
            "description": "Deep pothole near the crossing",
            "category": "cat1",
            "location": "Main St & 3rd",
        }
        data.update(fields)
        return report_service.create_report(db_session, session_of(by or owner), ReportCreate(**data))

    return _make


@pytest.fixture()
def report(make_report) -> Report:
    return make_report()


@pytest.fixture()
def make_comment(db_session: Session, other: User) -> Callable[..., Comment]:
    def _make(report: Report, by: User | None = None, text: str = "Saw this too", reply_to: str | None = None) -> Comment:
        return comment_service.add_comment(
            db_session, session_of(by or other), report.id, CommentCreate(text=text, reply_to=reply_to)
        )

    return _make


def at(day: int, hour: int = 12) -> datetime:
    return datetime(2026, 3, day, hour, 0, 0)
