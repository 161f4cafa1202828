"""Tests for structured logging helpers."""

from squeak.core.structured_logging import build_log_context


def test_build_log_context_includes_only_provided_fields():
    context = build_log_context(
        user_id="user-1",
        org_id="org-1",
        question_id=7,
        route="/api/question",
        method="POST",
    )

    assert context == {
        "user_id": "user-1",
        "org_id": "org-1",
        "question_id": 7,
        "route": "/api/question",
        "method": "POST",
    }


def test_build_log_context_ignores_empty_fields():
    context = build_log_context(
        user_id="",
        org_id=None,
        profile_id="profile-1",
    )

    assert context == {"profile_id": "profile-1"}


def test_build_log_context_keeps_zero_question_id():
    assert build_log_context(question_id=0) == {"question_id": 0}
