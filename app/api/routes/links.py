"""Short link endpoints: create, redirect, edit, delete and list."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import RedirectResponse

from app.api import schemas
from app.api.dependencies import get_current_user_id, get_link_service, require_user_id
from app.api.params import HashParam
from app.core.url_logger import log_link_access
from app.db.session import get_db
from app.middleware.logging import get_client_ip
from app.models.link import LinkView
from app.services.exceptions import (
    HashGenerationError,
    LinkExpiredError,
    LinkForbiddenError,
    LinkNotFoundError,
)
from app.services.links import LinkService

router = APIRouter(tags=["links"])


async def create_link(
    payload: schemas.LinkCreateRequest,
    db: AsyncSession = Depends(get_db),
    caller_id: Optional[uuid.UUID] = Depends(get_current_user_id),
    link_service: LinkService = Depends(get_link_service),
) -> LinkView:
    try:
        return await link_service.create_link(
            db=db,
            original_url=payload.original_url,
            expires_at=payload.expires_at,
            owner_id=caller_id,
        )
    except HashGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))


async def access_link(
    request: Request,
    hash: str = HashParam(),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
) -> RedirectResponse:
    try:
        destination = await link_service.access_link(db, hash)
    except LinkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LinkExpiredError as e:
        raise HTTPException(status_code=410, detail=str(e))

    log_link_access(hash, get_client_ip(request), request.headers.get("user-agent", ""))
    return RedirectResponse(url=destination, status_code=status.HTTP_302_FOUND)


async def update_link(
    payload: schemas.LinkUpdateRequest,
    hash: str = HashParam(),
    db: AsyncSession = Depends(get_db),
    caller_id: uuid.UUID = Depends(require_user_id),
    link_service: LinkService = Depends(get_link_service),
) -> LinkView:
    try:
        return await link_service.update_link(
            db=db,
            hash=hash,
            current_url=payload.current_url,
            caller_id=caller_id,
        )
    except LinkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LinkForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))


async def delete_link(
    hash: str = HashParam(),
    db: AsyncSession = Depends(get_db),
    caller_id: uuid.UUID = Depends(require_user_id),
    link_service: LinkService = Depends(get_link_service),
) -> Response:
    try:
        await link_service.delete_link(db=db, hash=hash, caller_id=caller_id)
    except LinkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LinkForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def list_links(
    db: AsyncSession = Depends(get_db),
    caller_id: uuid.UUID = Depends(require_user_id),
    link_service: LinkService = Depends(get_link_service),
) -> List[LinkView]:
    try:
        return await link_service.list_links_by_owner(db, caller_id)
    except LinkForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))


ERRORS = {
    400: {"model": schemas.ValidationErrorResponse, "description": "Invalid request"},
    401: {"model": schemas.ErrorResponse, "description": "Missing or invalid token"},
    403: {"model": schemas.ErrorResponse, "description": "Caller does not own the link"},
    404: {"model": schemas.ErrorResponse, "description": "Link not found"},
    410: {"model": schemas.ErrorResponse, "description": "Link expired"},
}


def _responses(*codes: int) -> dict:
    return {code: ERRORS[code] for code in codes}


# (method, path, handler, route options)
ROUTES = [
    ("POST", "/link", create_link, {
        "response_model": LinkView,
        "status_code": status.HTTP_201_CREATED,
        "summary": "Create a short link",
        "responses": _responses(400),
    }),
    ("GET", "/link", list_links, {
        "response_model": List[LinkView],
        "summary": "List the caller's links",
        "responses": _responses(401),
    }),
    ("GET", "/link/{hash}", access_link, {
        "response_class": RedirectResponse,
        "status_code": status.HTTP_302_FOUND,
        "summary": "Redirect to the link's destination",
        "responses": _responses(400, 404, 410),
    }),
    ("PATCH", "/link/{hash}", update_link, {
        "response_model": LinkView,
        "summary": "Change the link's destination",
        "responses": _responses(400, 401, 403, 404),
    }),
    ("DELETE", "/link/{hash}", delete_link, {
        "status_code": status.HTTP_204_NO_CONTENT,
        "response_class": Response,
        "summary": "Delete a link",
        "responses": _responses(400, 401, 403, 404),
    }),
]

for method, path, handler, options in ROUTES:
    router.add_api_route(path, handler, methods=[method], **options)
