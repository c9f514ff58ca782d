import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from .config import SECRET_KEY
from .database import get_db
from .models import User
from .shared.dates import utc_now

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_TTL = timedelta(days=30)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def create_session_token(user: User, expires_delta: timedelta = SESSION_TTL) -> str:
    """Issue a signed session token for a user"""
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "exp": utc_now() + expires_delta,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_session_token(token: str) -> dict:
    """Verify a session token and return its claims"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Session has expired. Please sign in again.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Invalid session token: {e}")
        raise HTTPException(status_code=401, detail="Invalid session token") from e


def _user_from_token(token: str, db: Session) -> User:
    claims = decode_session_token(token)
    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Invalid token claims") from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Session token for unknown user {user_id}")
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the signed-in user from the Bearer session token"""
    user = _user_from_token(credentials.credentials, db)
    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous callers (e.g. attendees) get None"""
    if not credentials:
        return None
    return _user_from_token(credentials.credentials, db)
