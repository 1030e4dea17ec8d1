from importlib import metadata

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, UJSONResponse

from keyserver.services.errors import KeyserverError
from keyserver.web.api.router import api_router
from keyserver.web.hkp.routes import router as hkp_router
from keyserver.web.lifetime import lifespan


def get_app() -> FastAPI:
    """
    Get FastAPI application.

    This is the main constructor of an application.

    :return: application.
    """
    app = FastAPI(
        title="keyserver",
        version=metadata.version("keyserver"),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        default_response_class=UJSONResponse,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(KeyserverError)
    async def keyserver_error_handler(request: Request, exc: KeyserverError) -> PlainTextResponse:
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
        return PlainTextResponse("Invalid request", status_code=400)

    # Main router for the API.
    app.include_router(router=api_router, prefix="/api")
    # HTTP Keyserver Protocol.
    app.include_router(router=hkp_router, prefix="/pks")

    return app
