"""Data access for public key and user id records."""
import datetime
import logging
from dataclasses import dataclass
from typing import Iterable, Optional
import uuid

from keyserver.db.config import database
from keyserver.db.models.keys import (
    PUBLISHED,
    ChallengeIntent,
    KeyStatus,
    PublicKey,
    UserId,
)
from keyserver.services.pgp import ParsedKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Challenge:
    """An outstanding nonce together with the record it guards."""

    record: PublicKey
    user_id: UserId


class KeyDAO:
    """Class for accessing the public_keys and user_ids tables."""

    async def upsert_pending(self, parsed: ParsedKey, nonce: str) -> PublicKey:
        """
        Create or replace the pending upload layer of a key.

        Published records sharing the key id are left untouched. The
        verification nonce is stored on the primary user id, replacing
        any nonce of an earlier upload.

        :param parsed: the parsed key.
        :param nonce: verification nonce for the primary user id.
        :return: the pending record.
        """
        async with database.transaction():
            await _lock_key_id(parsed.key_id)
            layers = await PublicKey.objects.filter(
                key_id=parsed.key_id,
                status=KeyStatus.PENDING.value,
            ).order_by("-uploaded_at").all()
            values = {
                "fingerprint": parsed.fingerprint,
                "armored": parsed.armored,
                "algorithm": parsed.algorithm,
                "key_size": parsed.key_size,
                "created_at": parsed.created_at,
                "uploaded_at": datetime.datetime.now(),
            }
            if layers:
                record = layers[0]
                await record.update(**values)
                await self._delete_records(layer.id for layer in layers[1:])
                await UserId.objects.filter(record_id=record.id).delete()
            else:
                record = await PublicKey.objects.create(
                    key_id=parsed.key_id,
                    status=KeyStatus.PENDING.value,
                    **values,
                )

            await UserId.objects.bulk_create([
                UserId(
                    record_id=record.id,
                    key_id=parsed.key_id,
                    name=uid.name,
                    email=uid.email,
                    is_primary=uid.is_primary,
                    status=KeyStatus.PENDING.value,
                    nonce=nonce if uid.is_primary else None,
                    intent=ChallengeIntent.VERIFY.value if uid.is_primary else None,
                )
                for uid in parsed.user_ids
            ])
        return record

    async def find_challenge(
        self,
        key_id: str,
        intent: ChallengeIntent,
    ) -> Optional[Challenge]:
        """Find the outstanding challenge of a key id for an intent."""
        expected = _expected_status(intent)
        user_ids = await UserId.objects.filter(
            key_id=key_id,
            is_primary=True,
            intent=intent.value,
            status=expected,
        ).all()
        for user_id in user_ids:
            if not user_id.nonce:
                continue
            record = await PublicKey.objects.get_or_none(
                id=user_id.record_id,
                status=expected,
            )
            if record is not None:
                return Challenge(record=record, user_id=user_id)
        return None

    async def mark_verified(self, challenge: Challenge, nonce: str) -> bool:
        """
        Publish a pending record if its nonce is still the one presented.

        Published records sharing the key id or the primary email are
        superseded by the newly verified one.

        :return: False when the nonce was replaced in the meantime.
        """
        record = challenge.record
        async with database.transaction():
            await _lock_key_id(record.key_id)
            current = await UserId.objects.get_or_none(
                id=challenge.user_id.id,
                nonce=nonce,
                intent=ChallengeIntent.VERIFY.value,
            )
            if current is None:
                return False
            await PublicKey.objects.filter(id=record.id).update(
                status=KeyStatus.VERIFIED.value,
                verified_at=datetime.datetime.now(),
            )
            await UserId.objects.filter(record_id=record.id).update(
                status=KeyStatus.VERIFIED.value,
                nonce=None,
                intent=None,
            )
            # No second nonce of this key id may stay outstanding.
            siblings = await PublicKey.objects.filter(
                key_id=record.key_id,
                status=KeyStatus.PENDING.value,
            ).exclude(id=record.id).all()
            await self._delete_records(sibling.id for sibling in siblings)
            await self._supersede(record, current.email)
        return True

    async def mark_pending_removal(self, record: PublicKey, nonce: str) -> None:
        """Flag a published record for removal and store the removal nonce."""
        async with database.transaction():
            await PublicKey.objects.filter(id=record.id).update(
                status=KeyStatus.PENDING_REMOVAL.value,
            )
            await UserId.objects.filter(record_id=record.id).update(
                status=KeyStatus.PENDING_REMOVAL.value,
                nonce=None,
                intent=None,
            )
            await UserId.objects.filter(record_id=record.id, is_primary=True).update(
                nonce=nonce,
                intent=ChallengeIntent.REMOVE.value,
            )

    async def remove(self, challenge: Challenge, nonce: str) -> bool:
        """
        Delete a record and its user ids if the removal nonce still matches.

        :return: False when the nonce was replaced in the meantime.
        """
        async with database.transaction():
            current = await UserId.objects.get_or_none(
                id=challenge.user_id.id,
                nonce=nonce,
                intent=ChallengeIntent.REMOVE.value,
            )
            if current is None:
                return False
            await self._delete_records([challenge.record.id])
        return True

    async def find_by_key_id(self, key_id: str) -> Optional[PublicKey]:
        """Find the published record with a 16 hex char key id."""
        return _latest(
            await PublicKey.objects.filter(
                key_id=key_id.upper(),
                status__in=list(PUBLISHED),
            ).all(),
        )

    async def find_by_fingerprint(self, fingerprint: str) -> Optional[PublicKey]:
        """Find the published record with a 40 hex char fingerprint."""
        return _latest(
            await PublicKey.objects.filter(
                fingerprint=fingerprint.upper(),
                status__in=list(PUBLISHED),
            ).all(),
        )

    async def find_by_email(self, email: str) -> Optional[PublicKey]:
        """Find the published record carrying a user id with this email."""
        user_ids = await UserId.objects.filter(
            email=email.strip().lower(),
            status__in=list(PUBLISHED),
        ).all()
        if not user_ids:
            return None
        return _latest(
            await PublicKey.objects.filter(
                id__in=list({uid.record_id for uid in user_ids}),
                status__in=list(PUBLISHED),
            ).all(),
        )

    async def get_user_ids(self, record: PublicKey) -> list[UserId]:
        """Get the user ids of a record, primary first."""
        user_ids = await UserId.objects.filter(record_id=record.id).all()
        return sorted(user_ids, key=lambda uid: (not uid.is_primary, uid.email))

    async def _supersede(self, record: PublicKey, email: str) -> None:
        same_key = await PublicKey.objects.filter(
            key_id=record.key_id,
            status__in=list(PUBLISHED),
        ).exclude(id=record.id).all()
        same_email = await UserId.objects.filter(
            email=email,
            is_primary=True,
            status__in=list(PUBLISHED),
        ).exclude(record_id=record.id).all()
        stale = {old.id for old in same_key} | {uid.record_id for uid in same_email}
        if stale:
            logger.info("Key %s supersedes %d published record(s)", record.key_id, len(stale))
            await self._delete_records(stale)

    async def _delete_records(self, record_ids: Iterable[uuid.UUID]) -> None:
        ids = list(record_ids)
        if not ids:
            return
        await UserId.objects.filter(record_id__in=ids).delete()
        await PublicKey.objects.filter(id__in=ids).delete()


async def _lock_key_id(key_id: str) -> None:
    """
    Serialize writers of one key id until the surrounding transaction ends.

    SQLite serializes writers itself, PostgreSQL gets a transaction
    scoped advisory lock.
    """
    if database.url.dialect != "postgresql":
        return
    await database.fetch_val(
        query="SELECT pg_advisory_xact_lock(hashtext(:key_id))",
        values={"key_id": key_id},
    )


def _expected_status(intent: ChallengeIntent) -> str:
    if intent is ChallengeIntent.VERIFY:
        return KeyStatus.PENDING.value
    return KeyStatus.PENDING_REMOVAL.value


def _latest(records: list[PublicKey]) -> Optional[PublicKey]:
    if not records:
        return None
    return max(records, key=lambda r: r.verified_at or r.uploaded_at)
