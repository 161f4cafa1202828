"""Structured logging helpers (no message bodies, no tokens)."""

import logging
from typing import Any

from squeak.core.config import settings


def configure_logging() -> None:
    """Install the process-wide log format."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_log_context(
    *,
    user_id: str | None = None,
    org_id: str | None = None,
    profile_id: str | None = None,
    question_id: int | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict with only the provided identifiers."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if org_id:
        context["org_id"] = org_id
    if profile_id:
        context["profile_id"] = profile_id
    if question_id is not None:
        context["question_id"] = question_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context
