"""API for checking project status."""
from keyserver.web.api.monitoring.views import router

__all__ = ["router"]
