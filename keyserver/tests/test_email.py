from urllib.parse import parse_qs, urlsplit

from email_validator import EmailNotValidError
import pytest

from keyserver.conftest import PRIMARY_EMAIL
from keyserver.services.email import EmailParams, EmailService, normalize_email
from keyserver.services.email import templates
from keyserver.services.email.templates import EmailContent
from keyserver.services.email.transport import SMTPTransport

PARAMS = EmailParams(
    name="safewithme testuser",
    email="safewithme.testuser@gmail.com",
    nonce="Zx-9_nonce",
    key_id="DBC0B3D92B1B86E9",
)


def _link(text: str) -> str:
    return next(word for word in text.split() if "/api/v1/key?" in word)


def test_verify_key_template() -> None:
    content = templates.verify_key(PARAMS, "https://keys.test.local/")

    assert content.subject == "Verify Your Key"
    assert PARAMS.email in content.text
    link = urlsplit(_link(content.text))
    assert link.path == "/api/v1/key"
    assert parse_qs(link.query) == {
        "op": ["verify"],
        "keyId": [PARAMS.key_id],
        "nonce": [PARAMS.nonce],
    }


def test_verify_remove_template() -> None:
    content = templates.verify_remove(PARAMS, "https://keys.test.local")

    query = parse_qs(urlsplit(_link(content.text)).query)
    assert query["op"] == ["verifyRemove"]
    assert query["nonce"] == [PARAMS.nonce]


def test_build_message() -> None:
    transport = SMTPTransport(host="localhost", port=25, sender="Key Server <noreply@keys.test.local>")

    message = transport.build_message(PARAMS.name, PARAMS.email, EmailContent("Subject", "Body"))

    assert message["To"] == "safewithme testuser <safewithme.testuser@gmail.com>"
    assert message["From"] == "Key Server <noreply@keys.test.local>"
    assert message["Subject"] == "Subject"
    assert message.get_content().strip() == "Body"


class _FakeTransport:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, EmailContent]] = []

    def send(self, name: str, address: str, content: EmailContent) -> None:
        self.sent.append((name, address, content))


@pytest.mark.anyio
async def test_email_service_renders_and_sends() -> None:
    transport = _FakeTransport()

    await EmailService(transport).send(templates.verify_key, PARAMS)

    assert len(transport.sent) == 1
    name, address, content = transport.sent[0]
    assert (name, address) == (PARAMS.name, PARAMS.email)
    assert content.subject == "Verify Your Key"


def test_normalize_email() -> None:
    assert normalize_email(" Safewithme.TestUser@GMail.com ") == PRIMARY_EMAIL


@pytest.mark.parametrize("address", ["just some text", "dev@box.test", "dev@localhost", "a@bco"])
def test_normalize_email_rejects(address: str) -> None:
    with pytest.raises(EmailNotValidError):
        normalize_email(address)
