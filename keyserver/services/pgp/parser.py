"""Parsing and normalization of ASCII-armored OpenPGP public keys.

Uses pgpy (pure Python) so no gpg binary or keyring is needed.
"""
import datetime
from dataclasses import dataclass, field
import logging
from typing import Any, Optional

from email_validator import EmailNotValidError
import pgpy
from pgpy.errors import PGPError

from keyserver.services.email.address import normalize_email
from keyserver.services.errors import InvalidKeyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedUserId:
    """Name and email of a single user id packet."""

    name: str
    email: str
    is_primary: bool = False


@dataclass(frozen=True)
class ParsedKey:
    """Normalized view of an uploaded public key."""

    fingerprint: str
    key_id: str
    armored: str
    algorithm: int
    key_size: Optional[int]
    created_at: Optional[datetime.datetime]
    user_ids: list[ParsedUserId] = field(default_factory=list)

    @property
    def primary_user_id(self) -> ParsedUserId:
        """The user id whose email gates verification."""
        return next(uid for uid in self.user_ids if uid.is_primary)


def parse_key(armored: str) -> ParsedKey:
    """
    Parse an ASCII-armored public key.

    :param armored: key text as submitted.
    :raises InvalidKeyError: for non-PGP input, private keys or keys
        without a user id carrying an email address.
    :return: the parsed key.
    """
    if not armored or not armored.strip():
        raise InvalidKeyError("Empty key text")
    try:
        key, _ = pgpy.PGPKey.from_blob(armored)
    except (PGPError, ValueError, TypeError, NotImplementedError, IndexError) as e:
        logger.debug("Rejected key text: %s", e)
        raise InvalidKeyError("Failed to parse OpenPGP key") from e

    if not key.is_public:
        raise InvalidKeyError("Only public keys are accepted")

    user_ids = _extract_user_ids(key)
    if not user_ids:
        raise InvalidKeyError("Key contains no user id with an email address")

    fingerprint = str(key.fingerprint).replace(" ", "").upper()
    return ParsedKey(
        fingerprint=fingerprint,
        key_id=fingerprint[-16:],
        armored=str(key),
        algorithm=int(key.key_algorithm),
        key_size=_key_size(key),
        created_at=_naive_utc(key.created),
        user_ids=user_ids,
    )


def _extract_user_ids(key: pgpy.PGPKey) -> list[ParsedUserId]:
    candidates = []
    for uid in key.userids:
        if not (uid.is_uid and uid.email):
            continue
        try:
            email = normalize_email(uid.email)
        except EmailNotValidError:
            logger.debug("Skipping user id without a valid email: %r", uid.email)
            continue
        candidates.append((uid, email))
    if not candidates:
        return []
    # The first self-certified primary uid wins, else the first one with an email.
    primary = next((uid for uid, _ in candidates if _is_primary(uid)), candidates[0][0])
    return [
        ParsedUserId(
            name=uid.name or "",
            email=email,
            is_primary=uid is primary,
        )
        for uid, email in candidates
    ]


def _is_primary(uid: Any) -> bool:
    try:
        return bool(uid.is_primary)
    except (PGPError, AttributeError):
        return False


def _key_size(key: pgpy.PGPKey) -> Optional[int]:
    size = key.key_size
    if isinstance(size, int):
        return size
    # Elliptic curve keys report their curve OID.
    return getattr(size, "key_size", None)


def _naive_utc(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
