"""Tenant config store - read access to per-organization widget settings."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from squeak.core.exceptions import ConfigMissingError
from squeak.db.enums import DEFAULT_PERMALINK_BASE
from squeak.db.models import SqueakConfig


def get_config(db: Session, org_id: str) -> SqueakConfig | None:
    """Get the config row for an organization."""
    return db.execute(
        select(SqueakConfig).where(SqueakConfig.organization_id == org_id)
    ).scalar_one_or_none()


def require_config(db: Session, org_id: str) -> SqueakConfig:
    """
    Get the config row, treating absence as a server-side failure.

    Raises:
        ConfigMissingError: Organization has no config row
    """
    config = get_config(db, org_id)
    if config is None:
        raise ConfigMissingError()
    return config


def create_config(
    db: Session,
    org_id: str,
    permalink_base: str = DEFAULT_PERMALINK_BASE,
    question_auto_publish: bool = True,
    company_name: str | None = None,
    company_domain: str | None = None,
) -> SqueakConfig:
    """Create the config row for a new organization (caller commits)."""
    config = SqueakConfig(
        organization_id=org_id,
        permalink_base=permalink_base.strip("/"),
        question_auto_publish=question_auto_publish,
        company_name=company_name,
        company_domain=company_domain,
    )
    db.add(config)
    db.flush()
    return config


def permalink_prefix(config: SqueakConfig) -> str:
    """Path prefix every permalink of this organization starts with."""
    return f"/{config.permalink_base}/"
