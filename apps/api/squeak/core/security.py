"""Session resolution against Supabase-issued access tokens.

Supabase signs access tokens as HS256 JWTs with the project's JWT secret,
so a session can be validated locally without a round trip to the auth API.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import jwt
from starlette.requests import HTTPConnection

from squeak.core.config import settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class UserIdentity:
    """External (auth provider) identity of the caller."""

    id: str
    email: str | None = None


class SessionResolver(Protocol):
    def resolve(self, request: HTTPConnection) -> UserIdentity | None: ...

    def validate_token(self, token: str) -> UserIdentity | None: ...


class SupabaseSessionResolver:
    """
    Resolve the caller from a Supabase access token.

    The token is read from ``Authorization: Bearer <token>`` first, then from
    the auth-helpers session cookie. A missing or invalid token resolves to
    ``None``; that is an expected outcome, not an error.
    """

    def __init__(self, secret: str, audience: str, cookie_name: str):
        self.secret = secret
        self.audience = audience
        self.cookie_name = cookie_name

    def resolve(self, request: HTTPConnection) -> UserIdentity | None:
        token = self._extract_token(request)
        if not token:
            return None
        return self.validate_token(token)

    def validate_token(self, token: str) -> UserIdentity | None:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[JWT_ALGORITHM],
                audience=self.audience,
            )
        except jwt.InvalidTokenError as e:
            logger.info("Rejected session token (%s)", type(e).__name__)
            return None

        subject = payload.get("sub")
        if not subject:
            return None
        return UserIdentity(id=str(subject), email=payload.get("email"))

    def _extract_token(self, request: HTTPConnection) -> str | None:
        authorization = request.headers.get("Authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return request.cookies.get(self.cookie_name)


def build_session_resolver() -> SupabaseSessionResolver:
    """Session resolver configured from settings."""
    return SupabaseSessionResolver(
        secret=settings.SUPABASE_JWT_SECRET,
        audience=settings.SUPABASE_JWT_AUDIENCE,
        cookie_name=settings.SESSION_COOKIE_NAME,
    )
