"""Classification of HKP operations and search terms."""
from dataclasses import dataclass
import enum
import re
from typing import Optional, Union

from email_validator import EmailNotValidError

from keyserver.services.email.address import normalize_email
from keyserver.services.errors import NotImplementedSearchError

KEY_ID_PREFIX = "0x"
HEX_RE = re.compile("^[a-fA-F0-9]+$")
SHORT_KEY_ID_LENGTH = 8
KEY_ID_LENGTH = 16
FINGERPRINT_LENGTH = 40


class Operation(str, enum.Enum):
    """Supported HKP lookup operations."""

    GET = "get"
    INDEX = "index"
    VINDEX = "vindex"


@dataclass(frozen=True)
class KeyIdSearch:
    """Search for a 16 hex char key id."""

    key_id: str

    def selector(self) -> dict[str, str]:
        return {"key_id": self.key_id}


@dataclass(frozen=True)
class FingerprintSearch:
    """Search for a 40 hex char fingerprint."""

    fingerprint: str

    @property
    def key_id(self) -> str:
        return self.fingerprint[-KEY_ID_LENGTH:]

    def selector(self) -> dict[str, str]:
        # Resolved through the key id, like v4 key ids are derived.
        return {"key_id": self.key_id}


@dataclass(frozen=True)
class EmailSearch:
    """Search for an email address."""

    email: str

    def selector(self) -> dict[str, str]:
        return {"email": self.email}


SearchTerm = Union[KeyIdSearch, FingerprintSearch, EmailSearch]


def parse_operation(op: Optional[str]) -> Operation:
    """
    Parse the `op` parameter.

    :raises NotImplementedSearchError: for missing or unsupported operations,
        including x-email.
    """
    try:
        return Operation((op or "").lower())
    except ValueError as e:
        raise NotImplementedSearchError(f"Operation not implemented: {op}") from e


def parse_options(options: Optional[str]) -> set[str]:
    """Split the comma separated `options` parameter."""
    if not options:
        return set()
    return {option.strip().lower() for option in options.split(",") if option.strip()}


def classify_search(search: Optional[str]) -> SearchTerm:
    """
    Classify an HKP search term.

    :raises NotImplementedSearchError: for short key ids, bare hex strings,
        malformed emails or a missing term.
    """
    if not search:
        raise NotImplementedSearchError("Missing search term")

    search = search.strip()
    if search[:2].lower() == KEY_ID_PREFIX:
        digits = search[2:]
        if not HEX_RE.match(digits):
            raise NotImplementedSearchError("Invalid key id format")
        if len(digits) == KEY_ID_LENGTH:
            return KeyIdSearch(key_id=digits.upper())
        if len(digits) == FINGERPRINT_LENGTH:
            return FingerprintSearch(fingerprint=digits.upper())
        if len(digits) == SHORT_KEY_ID_LENGTH:
            raise NotImplementedSearchError("Short key ids are not supported")
        raise NotImplementedSearchError("Invalid key id format")

    try:
        email = normalize_email(search)
    except EmailNotValidError as e:
        raise NotImplementedSearchError("Search type not implemented") from e
    return EmailSearch(email=email)
