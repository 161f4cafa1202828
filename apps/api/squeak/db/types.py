"""Custom SQLAlchemy types."""

from __future__ import annotations

from sqlalchemy import JSON, BigInteger, Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import Text, TypeDecorator

from squeak.core.encryption import decrypt_value, encrypt_value

# SQLite only auto-increments INTEGER PRIMARY KEY columns
BigIntIdentity = BigInteger().with_variant(Integer(), "sqlite")

JsonList = JSON().with_variant(JSONB(), "postgresql")


class EncryptedString(TypeDecorator):
    """Encrypt/decrypt string values transparently."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, str):
            value = str(value)
        if value == "":
            return ""
        return encrypt_value(value)

    def process_result_value(self, value, dialect):
        if value is None or value == "":
            return value
        return decrypt_value(value)
