import databases

from keyserver.settings import settings

database = databases.Database(settings.db_url)
