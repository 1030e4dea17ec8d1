"""Key lifecycle: upload, verification, removal and lookup."""
from dataclasses import dataclass
import logging
from typing import Annotated, Optional

from fastapi import Depends

from keyserver.db.dao.key_dao import KeyDAO
from keyserver.db.models.keys import ChallengeIntent, PublicKey, UserId
from keyserver.services.email import EmailParams, EmailService, get_email_service
from keyserver.services.email import templates
from keyserver.services.errors import KeyNotFoundError
from keyserver.services.nonce import NonceService
from keyserver.services.pgp import parse_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedKey:
    """A published record with its user ids, primary first."""

    record: PublicKey
    user_ids: list[UserId]

    @property
    def primary_user_id(self) -> UserId:
        """The user id that was verified by email."""
        return next((uid for uid in self.user_ids if uid.is_primary), self.user_ids[0])


class KeyLifecycle:
    """
    State machine of uploaded keys.

    pending -> verified -> pending_removal -> removed. Only verified and
    pending_removal records are served by lookups.
    """

    def __init__(
        self,
        email_service: Annotated[EmailService, Depends(get_email_service)],
    ) -> None:
        self.dao = KeyDAO()
        self.nonces = NonceService(self.dao)
        self.email_service = email_service

    async def upload(self, armored: str) -> str:
        """
        Store an uploaded key as pending and send the verification email.

        :param armored: ASCII-armored public key.
        :raises InvalidKeyError: if the key cannot be parsed.
        :return: key id of the stored key.
        """
        parsed = parse_key(armored)
        record, nonce = await self.nonces.issue_verification(parsed)
        primary = parsed.primary_user_id
        logger.info("Key %s uploaded, verification pending", record.key_id)
        await self.email_service.send(
            templates.verify_key,
            EmailParams(
                name=primary.name,
                email=primary.email,
                nonce=nonce,
                key_id=record.key_id,
            ),
        )
        return record.key_id

    async def verify(self, key_id: Optional[str], nonce: Optional[str]) -> None:
        """Consume a VERIFY nonce and publish the key."""
        challenge = await self.nonces.consume(key_id, nonce, ChallengeIntent.VERIFY)
        logger.info("Key %s verified", challenge.record.key_id)

    async def request_removal(
        self,
        key_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        """
        Flag a published key for removal and send the confirmation email.

        The key id selector is tried first, the email second.

        :raises KeyNotFoundError: if no published key matches.
        """
        record = await self._find(key_id=key_id, email=email)
        if record is None:
            raise KeyNotFoundError("Key not found")
        user_ids = await self.dao.get_user_ids(record)
        primary = PublishedKey(record, user_ids).primary_user_id
        nonce = await self.nonces.issue_removal(record)
        logger.info("Removal of key %s requested", record.key_id)
        await self.email_service.send(
            templates.verify_remove,
            EmailParams(
                name=primary.name,
                email=primary.email,
                nonce=nonce,
                key_id=record.key_id,
            ),
        )

    async def confirm_removal(self, key_id: Optional[str], nonce: Optional[str]) -> None:
        """Consume a REMOVE nonce and delete the key with its user ids."""
        challenge = await self.nonces.consume(key_id, nonce, ChallengeIntent.REMOVE)
        logger.info("Key %s removed", challenge.record.key_id)

    async def lookup(
        self,
        key_id: Optional[str] = None,
        email: Optional[str] = None,
        fingerprint: Optional[str] = None,
    ) -> PublishedKey:
        """
        Find a published key.

        :raises KeyNotFoundError: if nothing published matches.
        """
        record = await self._find(key_id=key_id, email=email, fingerprint=fingerprint)
        if record is None:
            raise KeyNotFoundError("Key not found")
        return PublishedKey(record, await self.dao.get_user_ids(record))

    async def _find(
        self,
        key_id: Optional[str] = None,
        email: Optional[str] = None,
        fingerprint: Optional[str] = None,
    ) -> Optional[PublicKey]:
        record = None
        if key_id:
            record = await self.dao.find_by_key_id(key_id)
        if record is None and fingerprint:
            record = await self.dao.find_by_fingerprint(fingerprint)
        if record is None and email:
            record = await self.dao.find_by_email(email)
        return record
