"""Settings for the application."""
import enum
import os
from typing import Optional
import dotenv

from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL

dotenv.load_dotenv(verbose=True, override=False)


class LogLevel(str, enum.Enum):  # noqa: WPS600
    """Possible log levels."""

    NOTSET = "NOTSET"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    host: str = "localhost"
    port: int = 8888
    # quantity of workers for uvicorn, one per CPU in production
    workers_count: int = int(os.getenv("WORKERS_COUNT", "1"))
    # Enable uvicorn reloading
    reload: bool = False

    log_level: LogLevel = LogLevel.INFO

    # Public base url used in verification links
    public_url: str = os.getenv("HOSTED_URL", "http://localhost:8888")

    # Variables for the database
    db_host: str = "keyserver-db"
    db_port: int = 5432
    db_user: str = "keyserver"
    db_pass: str = ""
    db_base: str = "keyserver"
    # When set, a SQLite file is used instead of PostgreSQL
    db_file: Optional[str] = None

    # Variables for outgoing mail
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_starttls: bool = False
    mail_sender: str = "OpenPGP Key Server <noreply@localhost>"

    @property
    def db_url(self) -> str:
        """
        Assemble database URL from settings.

        :return: database URL.
        """
        if self.db_file:
            return f"sqlite:///{self.db_file}"
        return str(
            URL.build(
                scheme="postgresql",
                host=self.db_host,
                port=self.db_port,
                user=self.db_user,
                password=self.db_pass,
                path=f"/{self.db_base}",
            ),
        )

    @property
    def postgres_admin_url(self) -> str:
        """URL of the maintenance database used to create and drop ours."""
        return str(
            URL.build(
                scheme="postgresql",
                host=self.db_host,
                port=self.db_port,
                user=self.db_user,
                password=self.db_pass,
                path="/postgres",
            ),
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="KEYSERVER_",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
