"""Enum definitions for application constants."""

from enum import Enum


class ProfileRole(str, Enum):
    """
    Per-organization role held in ``squeak_profiles_readonly``.

    - USER: widget end user (asks and answers)
    - MODERATOR: can moderate community content
    - ADMIN: manages the organization (imports, topics, settings)
    """
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


DEFAULT_PROFILE_ROLE = ProfileRole.USER
DEFAULT_PERMALINK_BASE = "questions"

ROLES_CAN_ADMINISTER = frozenset({ProfileRole.ADMIN})
