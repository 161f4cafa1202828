"""Organization service - tenant bootstrap."""

from sqlalchemy.orm import Session

from squeak.db.enums import DEFAULT_PERMALINK_BASE
from squeak.db.models import Organization
from squeak.services import config_service


def get_org_by_id(db: Session, org_id: str) -> Organization | None:
    """Get organization by ID."""
    return db.query(Organization).filter(Organization.id == org_id).first()


def create_org(
    db: Session,
    name: str,
    org_id: str | None = None,
    permalink_base: str = DEFAULT_PERMALINK_BASE,
    question_auto_publish: bool = True,
) -> Organization:
    """
    Create a new organization together with its config row.

    Raises:
        IntegrityError: If the id already exists
    """
    org = Organization(name=name)
    if org_id:
        org.id = org_id
    db.add(org)
    db.flush()
    config_service.create_config(
        db,
        org.id,
        permalink_base=permalink_base,
        question_auto_publish=question_auto_publish,
    )
    db.commit()
    db.refresh(org)
    return org
