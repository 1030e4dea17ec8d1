import os

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

from keyserver.settings import settings


def create_database() -> None:
    """Create a database, dropping a leftover one first."""
    if settings.db_file:
        drop_database()
        return

    db_name = make_url(settings.db_url).database
    engine = create_engine(settings.postgres_admin_url, isolation_level="AUTOCOMMIT")
    with engine.connect() as conn:
        database_existance = conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname=:name"),
            {"name": db_name},
        )
        if database_existance.scalar() == 1:
            drop_database()

    with engine.connect() as conn:
        conn.execute(text(f'CREATE DATABASE "{db_name}" ENCODING \'utf8\''))
    engine.dispose()


def drop_database() -> None:
    """Drop current database."""
    if settings.db_file:
        if os.path.exists(settings.db_file):
            os.remove(settings.db_file)
        return

    db_name = make_url(settings.db_url).database
    engine = create_engine(settings.postgres_admin_url, isolation_level="AUTOCOMMIT")
    with engine.connect() as conn:
        disc_users = (
            "SELECT pg_terminate_backend(pg_stat_activity.pid) "
            "FROM pg_stat_activity "
            "WHERE pg_stat_activity.datname = :name "
            "AND pid <> pg_backend_pid();"
        )
        conn.execute(text(disc_users), {"name": db_name})
        conn.execute(text(f'DROP DATABASE "{db_name}"'))
    engine.dispose()
