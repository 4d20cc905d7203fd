from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request, Response

from config import SETTINGS

logger = logging.getLogger(__name__)

COOKIE_NAME = "session"
ALGORITHM = "HS256"


def verify_passcode(passcode: str) -> bool:
    return secrets.compare_digest(passcode.encode(), SETTINGS.passcode.encode())


def create_session_token(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "authenticated": True,
        "iat": now,
        "exp": now + timedelta(days=SETTINGS.session_ttl_days),
    }
    return jwt.encode(payload, SETTINGS.jwt_secret, algorithm=ALGORITHM)


def verify_session_token(token: str) -> bool:
    try:
        jwt.decode(token, SETTINGS.jwt_secret, algorithms=[ALGORITHM])
        return True
    except jwt.PyJWTError:
        return False


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        COOKIE_NAME,
        token,
        httponly=True,
        secure=SETTINGS.cookie_secure,
        samesite="lax",
        max_age=60 * 60 * 24 * SETTINGS.session_ttl_days,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(COOKIE_NAME, path="/")


def is_authenticated(request: Request) -> bool:
    token = request.cookies.get(COOKIE_NAME)
    return bool(token) and verify_session_token(token)


def require_session(request: Request) -> None:
    """Dependency for dashboard API routes: a valid session cookie is required."""
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not verify_session_token(token):
        # Clear the stale cookie along with the 401.
        raise HTTPException(
            status_code=401,
            detail="Session expired",
            headers={"set-cookie": f"{COOKIE_NAME}=; Max-Age=0; Path=/"},
        )


def require_extension_or_session(request: Request) -> None:
    """Dependency for extension routes: a bearer token, else the session cookie."""
    header = request.headers.get("authorization", "")
    if header.startswith("Bearer "):
        if verify_session_token(header[len("Bearer "):]):
            return
        logger.info("Rejected extension request with invalid bearer token")
        raise HTTPException(status_code=401, detail="Invalid token")
    require_session(request)
