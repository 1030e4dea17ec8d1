"""Nonce challenges proving control of a key's primary email address."""
import hmac
import logging
import secrets

from keyserver.db.dao.key_dao import Challenge, KeyDAO
from keyserver.db.models.keys import ChallengeIntent, PublicKey
from keyserver.services.errors import (
    InvalidNonceError,
    KeyNotFoundError,
    MissingParameterError,
)
from keyserver.services.pgp import ParsedKey

logger = logging.getLogger(__name__)

# 32 random bytes, 43 url-safe characters.
NONCE_BYTES = 32


def new_nonce() -> str:
    """Generate an unguessable, URL-safe nonce."""
    return secrets.token_urlsafe(NONCE_BYTES)


def nonces_match(stored: str, presented: str) -> bool:
    """Compare nonces in constant time."""
    return hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))


class NonceService:
    """Issues and consumes verify and remove challenges."""

    def __init__(self, dao: KeyDAO) -> None:
        self.dao = dao

    async def issue_verification(self, parsed: ParsedKey) -> tuple[PublicKey, str]:
        """Store a pending upload layer guarded by a fresh VERIFY nonce."""
        nonce = new_nonce()
        record = await self.dao.upsert_pending(parsed, nonce)
        return record, nonce

    async def issue_removal(self, record: PublicKey) -> str:
        """Flag a published record for removal guarded by a fresh REMOVE nonce."""
        nonce = new_nonce()
        await self.dao.mark_pending_removal(record, nonce)
        return nonce

    async def consume(
        self,
        key_id: str | None,
        nonce: str | None,
        intent: ChallengeIntent,
    ) -> Challenge:
        """
        Consume a challenge and apply the transition it guards.

        A VERIFY nonce publishes the pending record, a REMOVE nonce deletes
        the record. The nonce is cleared by the transition, so a repeated
        call fails with KeyNotFoundError.

        :raises MissingParameterError: key id or nonce absent.
        :raises KeyNotFoundError: nothing outstanding for the key id.
        :raises InvalidNonceError: the nonce does not match.
        :return: the consumed challenge.
        """
        if not key_id:
            raise MissingParameterError("keyId")
        if not nonce:
            raise MissingParameterError("nonce")

        challenge = await self.dao.find_challenge(key_id.upper(), intent)
        if challenge is None or challenge.user_id.nonce is None:
            raise KeyNotFoundError(f"No pending {intent.value} request for key {key_id}")
        if not nonces_match(challenge.user_id.nonce, nonce):
            raise InvalidNonceError("Invalid nonce")

        if intent is ChallengeIntent.VERIFY:
            applied = await self.dao.mark_verified(challenge, nonce)
        else:
            applied = await self.dao.remove(challenge, nonce)
        if not applied:
            # A concurrent upload or removal request replaced the nonce.
            logger.info("Challenge for key %s was replaced before consumption", key_id)
            raise InvalidNonceError("Invalid nonce")
        return challenge
