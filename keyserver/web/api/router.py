from fastapi.routing import APIRouter

from keyserver.web.api import monitoring
from keyserver.web.api.key import routes as key_routes

api_router = APIRouter()
api_router.include_router(monitoring.router)
api_router.include_router(key_routes.api_router, prefix="/v1/key")
