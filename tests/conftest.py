from __future__ import annotations

import os
from datetime import datetime, timedelta
from typing import AsyncGenerator, Iterable, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Settings must be in place before bookline.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENCRYPTION_KEY"] = "A" * 43 + "="
os.environ["IS_SELF_HOSTED"] = "false"
os.environ["TWILIO_SID"] = "ACtest"
os.environ["TWILIO_TOKEN"] = "test-token"
os.environ["TWILIO_MESSAGING_SID"] = "MGtest"

from bookline import models, models_workflows  # noqa: E402, F401
from bookline.auth import create_session_token  # noqa: E402
from bookline.database import Base, SessionLocal, engine, get_db  # noqa: E402
from bookline.enums import MembershipRole  # noqa: E402


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://localhost",
        "http://127.0.0.1",
        "/",  # relative paths used by the ASGI transport
    )

    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(client, url_str: str) -> bool:
        if isinstance(getattr(client, "_transport", None), (httpx.MockTransport, ASGITransport)):
            return True
        return any(url_str.startswith(p) for p in allowed_prefixes)

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(self, url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest.fixture
def db():
    """Fresh schema and session for each test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    from bookline.main import app

    def get_db_override():
        yield db

    app.dependency_overrides[get_db] = get_db_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: models.User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(user)}"}


def make_user(db, email: str, name: Optional[str] = None, **kwargs) -> models.User:
    user = models.User(email=email, name=name or email.split("@")[0].title(), **kwargs)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_team(db, name: str = "Acme", **kwargs) -> models.Team:
    team = models.Team(name=name, **kwargs)
    db.add(team)
    db.commit()
    db.refresh(team)
    return team


def add_member(
    db,
    team: models.Team,
    user: models.User,
    role: MembershipRole = MembershipRole.MEMBER,
    accepted: bool = True,
    attributes: Optional[dict] = None,
) -> models.Membership:
    membership = models.Membership(
        team_id=team.id, user_id=user.id, role=role.value, accepted=accepted, attributes=attributes or {}
    )
    db.add(membership)
    db.commit()
    db.refresh(membership)
    return membership


def make_event_type(db, owner: models.User, length: int = 30, **kwargs) -> models.EventType:
    event_type = models.EventType(
        title=kwargs.pop("title", "Intro call"),
        slug=kwargs.pop("slug", "intro-call"),
        length=length,
        user_id=owner.id,
        **kwargs,
    )
    db.add(event_type)
    db.commit()
    db.refresh(event_type)
    return event_type


def make_booking(
    db,
    user: models.User,
    start: datetime,
    length: int = 30,
    event_type: Optional[models.EventType] = None,
    attendees: Iterable[tuple[str, str]] = (("Ada Attendee", "ada@example.com"),),
    **kwargs,
) -> models.Booking:
    booking = models.Booking(
        title=kwargs.pop("title", "Intro call"),
        start_time=start,
        end_time=start + timedelta(minutes=length),
        user_id=user.id,
        event_type_id=event_type.id if event_type else None,
        **kwargs,
    )
    booking.attendees = [models.Attendee(name=name, email=email) for name, email in attendees]
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


@pytest.fixture
def host(db) -> models.User:
    return make_user(db, "host@example.com", name="Hannah Host", time_zone="Europe/Berlin", locale="en")


@pytest.fixture
def event_type(db, host) -> models.EventType:
    return make_event_type(db, host)

