"""Routes for the HTTP Keyserver Protocol."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import Response

from keyserver.services.errors import MissingParameterError
from keyserver.services.hkp.resolver import HKPResolver
from keyserver.services.lifecycle import KeyLifecycle

router = APIRouter()


@router.post("/add", tags=["hkp"], summary="Submit a key", status_code=status.HTTP_201_CREATED)
async def add_key(
    lifecycle: Annotated[KeyLifecycle, Depends()],
    keytext: Annotated[Optional[str], Form()] = None,
) -> Response:
    """Upload a key, same as POST /api/v1/key."""
    if not keytext:
        raise MissingParameterError("keytext")
    await lifecycle.upload(keytext)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/lookup", tags=["hkp"], summary="Look up a key")
async def lookup(
    resolver: Annotated[HKPResolver, Depends()],
    op: Optional[str] = None,
    search: Optional[str] = None,
    options: Optional[str] = None,
) -> Response:
    """Perform an HKP `get`, `index` or `vindex` lookup."""
    rendered = await resolver.lookup(op, search, options)
    return Response(
        content=rendered.body,
        media_type=rendered.media_type,
        headers=rendered.headers,
    )
