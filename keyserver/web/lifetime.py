from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI

from keyserver.db.config import database
from keyserver.db.models import load_all_models
from keyserver.log import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # pragma: no cover
    """
    Connects to the database on startup and disconnects on shutdown.

    :param app: the fastAPI application.
    :yield: while the application serves requests.
    """
    configure_logging()
    load_all_models()
    if not database.is_connected:
        await database.connect()
    logger.info("Connected to database")
    app.state.database = database
    yield
    if database.is_connected:
        await database.disconnect()
    logger.info("Disconnected from database")
