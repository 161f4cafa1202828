"""FastAPI dependencies for database access, sessions and outbound clients."""

from typing import Generator

import httpx
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from squeak.core.config import settings
from squeak.core.exceptions import AuthenticationError
from squeak.core.security import SessionResolver, UserIdentity, build_session_resolver
from squeak.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.
    
    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_resolver() -> SessionResolver:
    return build_session_resolver()


def get_optional_user(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver),
) -> UserIdentity | None:
    """Caller identity, or None when the request carries no valid session."""
    return resolver.resolve(request)


def require_user(
    user: UserIdentity | None = Depends(get_optional_user),
) -> UserIdentity:
    """
    Caller identity for endpoints that need a session.

    Raises:
        AuthenticationError: No valid session on the request
    """
    if user is None:
        raise AuthenticationError()
    return user


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Process-wide pooled HTTP client.

    Created in the app lifespan; a short-lived client is used when the app
    runs without lifespan events (e.g. scripts mounting the ASGI app).
    """
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        request.app.state.http_client = client
    return client


def get_question_notifier(
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    from squeak.services.notification_service import SlackQuestionNotifier

    return SlackQuestionNotifier(http_client=http_client)


def get_image_uploader(
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    from squeak.services.image_service import CloudinaryUploader

    return CloudinaryUploader(http_client=http_client)


def get_slack_client_factory(
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Return a callable building a SlackClient for a bot token."""
    from squeak.services.slack_service import SlackClient

    def factory(token: str) -> SlackClient:
        return SlackClient(token=token, http_client=http_client)

    return factory
