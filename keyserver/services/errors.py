"""Errors raised by the keyserver services.

Each error carries the HTTP status it is reported with, the application
factory registers a single handler for the base class.
"""


class KeyserverError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputError(KeyserverError):
    """The request carried malformed input."""

    status_code = 400


class InvalidKeyError(InputError):
    """The submitted text is not a usable OpenPGP public key."""


class MissingParameterError(InputError):
    """A required request parameter is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing parameter: {field}")
        self.field = field


class InvalidParameterError(InputError):
    """A request parameter is present but malformed."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid parameter {field}: {reason}")
        self.field = field


class NotFoundError(KeyserverError):
    """The requested resource does not exist or is not published."""

    status_code = 404


class KeyNotFoundError(NotFoundError):
    """No published key matches the selector."""


class InvalidNonceError(NotFoundError):
    """A challenge exists but the presented nonce does not match it."""


class NotImplementedSearchError(KeyserverError):
    """The HKP search syntax or operation is not supported."""

    status_code = 501


class EmailTransportError(KeyserverError):
    """The notification could not be handed to the mail server."""
