import ormar

from keyserver.db.config import database
from keyserver.db.meta import meta

base_ormar_config = ormar.OrmarConfig(
    database=database,
    metadata=meta,
)
