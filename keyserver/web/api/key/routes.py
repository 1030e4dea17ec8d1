"""Routes for the public key REST API."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse, Response

from keyserver.services.errors import InvalidParameterError
from keyserver.services.lifecycle import KeyLifecycle
from keyserver.web.api.key.dto import KeyOut, PublicKeyIn
from keyserver.web.api.key.params import (
    ChallengeParams,
    ParamError,
    SelectorParams,
    validate_challenge,
    validate_selector,
)

api_router = APIRouter()

Lifecycle = Annotated[KeyLifecycle, Depends()]
KeyIdQuery = Annotated[Optional[str], Query(alias="keyId")]


@api_router.post("", tags=["key"], summary="Upload a public key", status_code=status.HTTP_201_CREATED)
async def upload_key(body: PublicKeyIn, lifecycle: Lifecycle) -> Response:
    """Upload a key, a verification email is sent to its primary user id."""
    await lifecycle.upload(body.public_key_armored)
    return Response(status_code=status.HTTP_201_CREATED)


@api_router.get("", tags=["key"], summary="Get a key or confirm a challenge", response_model=None)
async def get_key(
    lifecycle: Lifecycle,
    op: Optional[str] = None,
    key_id: KeyIdQuery = None,
    email: Optional[str] = None,
    fingerprint: Optional[str] = None,
    nonce: Optional[str] = None,
) -> KeyOut | PlainTextResponse:
    """
    Look up a published key by key id, email or fingerprint.

    With `op=verify` or `op=verifyRemove` the nonce from a challenge email
    is consumed instead.
    """
    match op:
        case "verify":
            params = _challenge(key_id, nonce)
            await lifecycle.verify(params.key_id, params.nonce)
            return PlainTextResponse("Key successfully verified")
        case "verifyRemove":
            params = _challenge(key_id, nonce)
            await lifecycle.confirm_removal(params.key_id, params.nonce)
            return PlainTextResponse("Key successfully removed")
        case None:
            selector = _selector(key_id, email, fingerprint)
            key = await lifecycle.lookup(
                key_id=selector.key_id,
                email=selector.email,
                fingerprint=selector.fingerprint,
            )
            return KeyOut.from_published(key)
        case _:
            raise InvalidParameterError("op", "unsupported operation")


@api_router.delete("", tags=["key"], summary="Request removal of a key", status_code=status.HTTP_202_ACCEPTED)
async def delete_key(
    lifecycle: Lifecycle,
    key_id: KeyIdQuery = None,
    email: Optional[str] = None,
) -> PlainTextResponse:
    """Request removal, a confirmation email is sent to the primary user id."""
    selector = _selector(key_id, email)
    await lifecycle.request_removal(key_id=selector.key_id, email=selector.email)
    return PlainTextResponse(
        "Check your inbox to verify the removal of your key",
        status_code=status.HTTP_202_ACCEPTED,
    )


def _challenge(key_id: Optional[str], nonce: Optional[str]) -> ChallengeParams:
    match validate_challenge(key_id, nonce):
        case ParamError() as error:
            raise error.to_exception()
        case ChallengeParams() as params:
            return params


def _selector(
    key_id: Optional[str],
    email: Optional[str],
    fingerprint: Optional[str] = None,
) -> SelectorParams:
    match validate_selector(key_id, email, fingerprint):
        case ParamError() as error:
            raise error.to_exception()
        case SelectorParams() as selector:
            return selector
