"""Dispatches challenge emails."""
from typing import Callable

from starlette.concurrency import run_in_threadpool

from keyserver.services.email.templates import EmailContent, EmailParams
from keyserver.services.email.transport import SMTPTransport
from keyserver.settings import settings

Template = Callable[[EmailParams, str], EmailContent]


class EmailService:
    """Renders a template and requests transport."""

    def __init__(self, transport: SMTPTransport) -> None:
        self.transport = transport

    async def send(self, template: Template, params: EmailParams) -> None:
        """Render `template` for `params` and send it to the user id's address."""
        content = template(params, settings.public_url)
        await run_in_threadpool(self.transport.send, params.name, params.email, content)


def get_email_service() -> EmailService:
    """Dependency returning the email service."""
    return EmailService(SMTPTransport.from_settings())
