"""Email address normalization shared by key parsing and lookups."""
from email_validator import validate_email


def normalize_email(address: str) -> str:
    """
    Validate an address and return the form it is stored and looked up by.

    Special-use domains (`.test`, `.local`, `localhost`, ...) are rejected.

    :raises EmailNotValidError: if the address is not a deliverable syntax.
    :return: normalized, lower case address.
    """
    return validate_email(address.strip(), check_deliverability=False).normalized.lower()
