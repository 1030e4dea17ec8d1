import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from keyserver.services.lifecycle import PublishedKey


class PublicKeyIn(BaseModel):
    """Key upload body."""

    public_key_armored: str = Field(alias="publicKeyArmored")


class UserIdOut(BaseModel):
    """User id of a published key."""

    name: str
    email: str
    verified: bool


class KeyOut(BaseModel):
    """Published key"""

    model_config = ConfigDict(populate_by_name=True)

    key_id: str = Field(alias="keyId")
    fingerprint: str
    user_ids: list[UserIdOut] = Field(alias="userIds")
    algorithm: int
    key_size: Optional[int] = Field(alias="keySize")
    created: Optional[datetime.datetime]
    uploaded: datetime.datetime
    verified: Optional[datetime.datetime]
    public_key_armored: str = Field(alias="publicKeyArmored")

    @classmethod
    def from_published(cls, key: PublishedKey) -> "KeyOut":
        record = key.record
        return cls(
            key_id=record.key_id,
            fingerprint=record.fingerprint,
            user_ids=[
                UserIdOut(name=uid.name, email=uid.email, verified=uid.is_primary)
                for uid in key.user_ids
            ],
            algorithm=record.algorithm,
            key_size=record.key_size,
            created=record.created_at,
            uploaded=record.uploaded_at,
            verified=record.verified_at,
            public_key_armored=record.armored,
        )
