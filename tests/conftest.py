"""Shared test fixtures and configuration.

Points the app at an in-memory SQLite database before anything from tempora
is imported, recreates the tables for every test, and provides factories for
users, events and fake OpenAI responses.
"""

import os

# Patch env vars BEFORE any tempora imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from tempora import models  # noqa: F401
from tempora.database import Base, SessionLocal, engine
from tempora.models import Event, EventTimeSlot, Schedule, User
from tempora.models.enums import FriendshipStatus, UserType
from tempora.models.friendship import Friendship
from tempora.utils.security import get_password_hash


@pytest.fixture(autouse=True)
def _reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(fname="Alice", lname="Smith", email=None, password=None, admin=False):
        counter["n"] += 1
        user = User(
            email=email or f"{fname.lower()}{counter['n']}@example.com",
            fname=fname,
            lname=lname,
            hashed_password=get_password_hash(password) if password else None,
            type=UserType.ADMIN.value if admin else UserType.USER.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_schedule(db):
    def _make_schedule(user, name="My Schedule"):
        schedule = Schedule(name=name, user_id=user.id)
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        return schedule

    return _make_schedule


@pytest.fixture
def make_event(db):
    def _make_event(schedule, slots, name="Standup", repeated="NEVER", repeat_until=None, description=None):
        event = Event(
            schedule_id=schedule.id,
            name=name,
            description=description,
            repeated=repeated,
            repeat_until=repeat_until,
            time_slots=[
                EventTimeSlot(position=i, start=start, end=end)
                for i, (start, end) in enumerate(slots)
            ],
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event


@pytest.fixture
def befriend(db):
    def _befriend(requester, recipient, status=FriendshipStatus.ACCEPTED.value):
        friendship = Friendship(
            user_id1=requester.id, user_id2=recipient.id, status=status
        )
        db.add(friendship)
        db.commit()
        return friendship

    return _befriend


@pytest.fixture
def app():
    from tempora.main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Sign up through the API; the client keeps the session cookie"""

    def _signup(test_client=None, fname="Alice", lname="Smith", email="alice@example.com", password="password123"):
        response = (test_client or client).post(
            "/api/auth/signup",
            json={"fname": fname, "lname": lname, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]["user"]

    return _signup


# Fake OpenAI responses


def make_tool_call(call_id, name, arguments):
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


def make_completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_openai():
    """MagicMock with the chat.completions.create shape of the OpenAI client"""
    client = MagicMock()
    client.chat.completions.create.return_value = make_completion("Done.")
    return client


@pytest.fixture
def completions():
    return SimpleNamespace(tool_call=make_tool_call, completion=make_completion)

