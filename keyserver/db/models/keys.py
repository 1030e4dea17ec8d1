"""Public key and user id models."""
import datetime
import enum
from typing import Optional
import uuid

import ormar

from keyserver.db.base import base_ormar_config


class KeyStatus(str, enum.Enum):
    """Lifecycle state of an uploaded key."""

    PENDING = "pending"
    VERIFIED = "verified"
    PENDING_REMOVAL = "pending_removal"


# States in which a key is served by the lookup endpoints.
PUBLISHED = (KeyStatus.VERIFIED.value, KeyStatus.PENDING_REMOVAL.value)


class ChallengeIntent(str, enum.Enum):
    """What an outstanding nonce confirms when it is consumed."""

    VERIFY = "verify"
    REMOVE = "remove"


class PublicKey(ormar.Model):
    """One upload layer of an OpenPGP public key."""

    ormar_config = base_ormar_config.copy(tablename="public_keys")

    id: uuid.UUID = ormar.UUID(primary_key=True, default=uuid.uuid4)
    key_id: str = ormar.String(max_length=16, index=True)
    fingerprint: str = ormar.String(max_length=40, index=True)
    armored: str = ormar.Text()
    algorithm: int = ormar.Integer()
    key_size: Optional[int] = ormar.Integer(nullable=True)
    created_at: Optional[datetime.datetime] = ormar.DateTime(nullable=True)
    status: str = ormar.String(max_length=20, default=KeyStatus.PENDING.value)
    uploaded_at: datetime.datetime = ormar.DateTime(default=datetime.datetime.now)
    verified_at: Optional[datetime.datetime] = ormar.DateTime(nullable=True)


class UserId(ormar.Model):
    """A user id (name and email) carried by a public key."""

    ormar_config = base_ormar_config.copy(tablename="user_ids")

    id: uuid.UUID = ormar.UUID(primary_key=True, default=uuid.uuid4)
    record_id: uuid.UUID = ormar.UUID(index=True)
    key_id: str = ormar.String(max_length=16, index=True)
    name: str = ormar.String(max_length=500, default="")
    email: str = ormar.String(max_length=320, index=True)
    is_primary: bool = ormar.Boolean(default=False)
    status: str = ormar.String(max_length=20, default=KeyStatus.PENDING.value)
    nonce: Optional[str] = ormar.String(max_length=100, nullable=True)
    intent: Optional[str] = ormar.String(max_length=10, nullable=True)
