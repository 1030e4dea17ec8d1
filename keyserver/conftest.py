import os
from pathlib import Path
from tempfile import gettempdir
from typing import Any, AsyncGenerator

os.environ.setdefault(
    "KEYSERVER_DB_FILE",
    str(Path(gettempdir()) / f"keyserver-test-{os.getpid()}.db"),
)
os.environ.setdefault("KEYSERVER_PUBLIC_URL", "https://keys.test.local")

import pgpy  # noqa: E402
from pgpy.constants import (  # noqa: E402
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)
import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.engine import create_engine  # noqa: E402

from keyserver.db.config import database  # noqa: E402
from keyserver.db.utils import create_database, drop_database  # noqa: E402
from keyserver.services.email import EmailParams, get_email_service  # noqa: E402
from keyserver.services.email.service import Template  # noqa: E402
from keyserver.settings import settings  # noqa: E402
from keyserver.web.application import get_app  # noqa: E402

PRIMARY_EMAIL = "safewithme.testuser@gmail.com"


class RecordingEmailService:
    """Email service that keeps sent messages instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[tuple[Template, EmailParams]] = []

    async def send(self, template: Template, params: EmailParams) -> None:
        self.sent.append((template, params))

    @property
    def last_params(self) -> EmailParams:
        return self.sent[-1][1]


def make_key(*user_ids: tuple[str, str], private: bool = False) -> str:
    """Generate an RSA key carrying `(name, email)` user ids, first is primary."""
    key = pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    for index, (name, email) in enumerate(user_ids):
        key.add_uid(
            pgpy.PGPUID.new(name, email=email),
            usage={KeyFlags.Sign, KeyFlags.Certify, KeyFlags.EncryptCommunications},
            hashes=[HashAlgorithm.SHA256],
            ciphers=[SymmetricKeyAlgorithm.AES256],
            compression=[CompressionAlgorithm.ZLIB],
            primary=index == 0,
        )
    if private:
        return str(key)
    return str(key.pubkey)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """
    Backend for anyio pytest plugin.

    :return: backend name.
    """
    return "asyncio"


@pytest.fixture(scope="session")
def public_key_armored() -> str:
    """Key with a primary and a secondary user id."""
    return make_key(
        ("safewithme testuser", PRIMARY_EMAIL),
        ("safewithme work", "safewithme.work@gmail.com"),
    )


@pytest.fixture(scope="session")
def other_key_armored() -> str:
    """Unrelated key with a single user id."""
    return make_key(("Other Person", "other.person@gmail.com"))


@pytest.fixture
async def initialize_db(anyio_backend: Any) -> AsyncGenerator[None, None]:
    """
    Create models and databases.

    :yield: nothing, the database is connected.
    """
    from keyserver.db.meta import meta  # noqa: WPS433
    from keyserver.db.models import load_all_models  # noqa: WPS433

    load_all_models()

    create_database()

    engine = create_engine(settings.db_url)
    with engine.begin() as conn:
        meta.create_all(conn)

    engine.dispose()

    await database.connect()

    yield

    await database.disconnect()
    drop_database()


@pytest.fixture
def email_service() -> RecordingEmailService:
    """Email service recording what would be sent."""
    return RecordingEmailService()


@pytest.fixture
def fastapi_app(email_service: RecordingEmailService) -> FastAPI:
    """
    Fixture for creating FastAPI app.

    :return: fastapi app with mocked dependencies.
    """
    application = get_app()
    application.dependency_overrides[get_email_service] = lambda: email_service
    return application  # noqa: WPS331


@pytest.fixture
async def client(
    fastapi_app: FastAPI,
    initialize_db: None,
    anyio_backend: Any,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Fixture that creates client for requesting server.

    :param fastapi_app: the application.
    :yield: client for the app.
    """
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
