"""Tests for session tokens."""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from jose import jwt

from bookline.auth import ALGORITHM, create_session_token, decode_session_token
from bookline.config import SECRET_KEY

from tests.conftest import make_user


def test_round_trip_claims(db):
    user = make_user(db, "host@example.com")

    claims = decode_session_token(create_session_token(user))

    assert claims["sub"] == str(user.id)
    assert claims["email"] == "host@example.com"


def test_expired_token(db):
    user = make_user(db, "host@example.com")
    token = create_session_token(user, expires_delta=timedelta(seconds=-10))

    with pytest.raises(HTTPException) as exc:
        decode_session_token(token)

    assert exc.value.status_code == 401
    assert exc.value.headers == {"X-Token-Expired": "true"}


def test_tampered_token():
    with pytest.raises(HTTPException) as exc:
        decode_session_token("not.a.token")

    assert exc.value.status_code == 401


async def test_non_numeric_subject_is_unauthorized(client):
    token = jwt.encode({"sub": "host@example.com"}, SECRET_KEY, algorithm=ALGORITHM)

    response = await client.post(
        "/api/integrations/sendgrid/add",
        json={"api_key": "SG.secret"},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token claims"
