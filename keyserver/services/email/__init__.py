"""Challenge notifications."""
from keyserver.services.email.address import normalize_email
from keyserver.services.email.service import EmailService, get_email_service
from keyserver.services.email.templates import EmailContent, EmailParams

__all__ = [
    "EmailContent",
    "EmailParams",
    "EmailService",
    "get_email_service",
    "normalize_email",
]
