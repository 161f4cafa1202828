"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, created fresh for each test
- Organizations, configs and profiles in the shapes the widget expects
- Supabase-style JWT minting for authenticated tests
- HTTPX AsyncClient against the ASGI app with a recording notifier
"""
import os
import time
import uuid
from dataclasses import dataclass, field
from typing import AsyncGenerator, Generator

# Settings are read at import time; configure them before importing the app
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-length-for-hs256"
os.environ["SECRETS_ENCRYPTION_KEY"] = "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY="
os.environ["CORS_ORIGINS"] = "https://widget.example.com"

import jwt
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

from squeak.main import app
from squeak.core.config import settings
from squeak.core.deps import get_db, get_question_notifier
from squeak.core.security import UserIdentity
from squeak.db.base import Base
from squeak.db.enums import ProfileRole
from squeak.db.models import Organization, Profile
from squeak.db.session import engine, SessionLocal
from squeak.services import org_service, profile_service
from squeak.services.notification_service import QuestionAlert


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Session on a freshly created schema.

    App code commits through this same session; the schema is dropped
    after each test.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_org(db: Session) -> Organization:
    """Organization with default config (permalink base ``questions``, auto-publish on)."""
    return org_service.create_org(db, name="Acme", org_id=f"org-{uuid.uuid4().hex[:8]}")


@pytest.fixture(scope="function")
def other_org(db: Session) -> Organization:
    return org_service.create_org(db, name="Globex", org_id=f"org-{uuid.uuid4().hex[:8]}")


# =============================================================================
# Auth Fixtures
# =============================================================================

def mint_token(user_id: str, email: str | None = None, **overrides) -> str:
    """Sign an access token the way Supabase does."""
    payload = {
        "sub": user_id,
        "aud": settings.SUPABASE_JWT_AUDIENCE,
        "exp": int(time.time()) + 3600,
        "email": email or f"{user_id}@example.com",
        "role": "authenticated",
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


@dataclass
class Member:
    """A widget user with a profile in one organization."""
    user: UserIdentity
    profile: Profile
    org: Organization
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def make_member(
    db: Session,
    org: Organization,
    role: ProfileRole = ProfileRole.USER,
    first_name: str = "Test",
    user_id: str | None = None,
) -> Member:
    user = UserIdentity(id=user_id or str(uuid.uuid4()))
    profile = profile_service.register_profile(
        db,
        org_id=org.id,
        user=user,
        first_name=first_name,
        last_name="User",
        role=role,
    )
    return Member(user=user, profile=profile, org=org, token=mint_token(user.id))


@pytest.fixture(scope="function")
def member(db: Session, test_org: Organization) -> Member:
    return make_member(db, test_org)


@pytest.fixture(scope="function")
def admin(db: Session, test_org: Organization) -> Member:
    return make_member(db, test_org, role=ProfileRole.ADMIN, first_name="Ada")


# =============================================================================
# Client Fixtures
# =============================================================================

@dataclass
class RecordingNotifier:
    """Stands in for the Slack notifier; records alerts, optionally fails."""
    alerts: list[QuestionAlert] = field(default_factory=list)
    fail: bool = False

    async def notify(self, alert: QuestionAlert) -> None:
        if self.fail:
            raise RuntimeError("notifier down")
        self.alerts.append(alert)


@pytest.fixture(scope="function")
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="function")
async def client(
    db: Session, notifier: RecordingNotifier
) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the app, sharing the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_question_notifier] = lambda: notifier

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def create_member(db: Session):
    """Factory for members of arbitrary organizations and roles."""
    def _create(
        org: Organization,
        role: ProfileRole = ProfileRole.USER,
        first_name: str = "Test",
        user_id: str | None = None,
    ) -> Member:
        return make_member(db, org, role=role, first_name=first_name, user_id=user_id)

    return _create


@pytest.fixture(scope="function")
def token_for():
    return mint_token
