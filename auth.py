import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException, Request, Response, status
from sqlmodel import Session

import storage
from models import User
from utils import utcnow

logger = logging.getLogger(__name__)

SESSION_COOKIE = "flux_session"
SESSION_TTL = timedelta(days=7)
SESSION_MAX_AGE = int(SESSION_TTL.total_seconds())

# Identity injected when sessions are not enforced (local/dev deployments).
DEMO_IDENTITY = {
    "id": "demo-user",
    "email": "demo@example.com",
    "first_name": "Demo",
    "last_name": "User",
    "profile_image_url": None,
}


def _write_session_cookie(response: Response, value: str, max_age: int, secure: bool) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=value,
        max_age=max_age,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )


def create_session(
    session: Session,
    response: Response,
    user_id: str,
    secure: bool = False,
    now: Optional[datetime] = None,
) -> str:
    """Store a new session row for `user_id` and set its cookie on `response`."""
    if now is None:
        now = utcnow()

    sid = secrets.token_urlsafe(32)
    storage.insert_session(session, sid, user_id, now + SESSION_TTL)
    _write_session_cookie(response, sid, SESSION_MAX_AGE, secure)

    logger.debug("Session created for user %s", user_id)
    return sid


def get_session_user(
    session: Session,
    request: Request,
    now: Optional[datetime] = None,
) -> Optional[User]:
    """Resolve the session cookie into its user, or None.

    A missing cookie, an unknown sid and an expired sid all look the same.
    """
    sid = request.cookies.get(SESSION_COOKIE)
    if not sid:
        return None
    return storage.find_session_user(session, sid, now=now)


def destroy_session(
    session: Session,
    request: Request,
    response: Response,
    secure: bool = False,
) -> None:
    """Delete the session row (if any) and always expire the cookie."""
    sid = request.cookies.get(SESSION_COOKIE)
    if sid:
        storage.delete_session(session, sid)
        logger.debug("Session destroyed")

    _write_session_cookie(response, "", 0, secure)


def unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )


class AuthProvider:
    """Turns an incoming request into the acting user or raises 401."""

    name = "base"

    def resolve(self, request: Request, session: Session) -> User:
        raise NotImplementedError


class SessionAuthProvider(AuthProvider):
    """Requires a valid, unexpired session cookie."""

    name = "session"

    def resolve(self, request: Request, session: Session) -> User:
        user = get_session_user(session, request)
        if user is None:
            raise unauthorized()
        return user


class DemoAuthProvider(AuthProvider):
    """Treats every request as the fixed demo identity. No lookup happens."""

    name = "demo"

    def resolve(self, request: Request, session: Session) -> User:
        return User(**DEMO_IDENTITY)


def select_auth_provider(settings) -> AuthProvider:
    """Pick the provider once, at process start."""
    if settings.auth_enforced:
        return SessionAuthProvider()
    return DemoAuthProvider()
