"""Validation of key API query parameters.

Validators return either the parsed parameters or a ParamError naming the
offending field, callers branch on the result type.
"""
from dataclasses import dataclass
import re
from typing import Optional, Union

from email_validator import EmailNotValidError

from keyserver.services.email.address import normalize_email
from keyserver.services.errors import (
    InputError,
    InvalidParameterError,
    MissingParameterError,
)

KEY_ID_RE = re.compile("^[a-fA-F0-9]{16}$")
FINGERPRINT_RE = re.compile("^[a-fA-F0-9]{40}$")


@dataclass(frozen=True)
class ChallengeParams:
    """Parameters of a verify or verifyRemove request."""

    key_id: str
    nonce: str


@dataclass(frozen=True)
class SelectorParams:
    """Selectors of a lookup or removal request, at least one is set."""

    key_id: Optional[str] = None
    email: Optional[str] = None
    fingerprint: Optional[str] = None


@dataclass(frozen=True)
class ParamError:
    """A missing or malformed parameter."""

    field: str
    reason: Optional[str] = None

    def to_exception(self) -> InputError:
        if self.reason is None:
            return MissingParameterError(self.field)
        return InvalidParameterError(self.field, self.reason)


def validate_challenge(
    key_id: Optional[str],
    nonce: Optional[str],
) -> Union[ChallengeParams, ParamError]:
    """Validate the parameters of a challenge confirmation."""
    if not key_id:
        return ParamError("keyId")
    if not nonce:
        return ParamError("nonce")
    if not KEY_ID_RE.match(key_id):
        return ParamError("keyId", "expected 16 hex characters")
    return ChallengeParams(key_id=key_id.upper(), nonce=nonce)


def validate_selector(
    key_id: Optional[str],
    email: Optional[str],
    fingerprint: Optional[str] = None,
) -> Union[SelectorParams, ParamError]:
    """Validate key id, email and fingerprint selectors."""
    if not (key_id or email or fingerprint):
        return ParamError("keyId")
    if key_id and not KEY_ID_RE.match(key_id):
        return ParamError("keyId", "expected 16 hex characters")
    if fingerprint and not FINGERPRINT_RE.match(fingerprint):
        return ParamError("fingerprint", "expected 40 hex characters")
    normalized_email = None
    if email:
        try:
            normalized_email = normalize_email(email)
        except EmailNotValidError:
            return ParamError("email", "not a valid email address")
    return SelectorParams(
        key_id=key_id.upper() if key_id else None,
        email=normalized_email,
        fingerprint=fingerprint.upper() if fingerprint else None,
    )
