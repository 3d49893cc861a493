"""APIRouter exposing grant management and the permission change feed."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends, HTTPException, WebSocket, status

from sharegate.exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ShareGateError,
    ValidationError,
)
from sharegate.models import UserBase

from ._channel import WebSocketChannel
from ._schemas import CapabilitiesRequest, CapabilitiesResponse, GrantRequest, GrantResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from sharegate.service import SharingService

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[ShareGateError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AccessDeniedError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}


def _http_error(exc: ShareGateError) -> HTTPException:
    for error_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def create_router(
    service: SharingService,
    current_user: Callable[..., Any],
    *,
    prefix: str = "",
) -> APIRouter:
    """Build the sharing routes.

    *current_user* is a FastAPI dependency returning the authenticated
    ``UserBase``; authentication itself is the caller's concern.

    The ``/ws`` feed only ever sends server-originated
    ``permission_update`` events.  Frames sent by clients are read to
    notice disconnects and otherwise ignored.
    """
    router = APIRouter(prefix=prefix, tags=["sharing"])

    @router.get("/files/{file_id}/permissions", response_model=list[GrantResponse])
    async def list_permissions(
        file_id: int,
        user: UserBase = Depends(current_user),
    ) -> list[GrantResponse]:
        try:
            grants = await service.list_grants(user, file_id)
        except ShareGateError as e:
            raise _http_error(e) from e
        return [GrantResponse.from_grant(g) for g in grants]

    @router.get("/files/{file_id}/capabilities", response_model=CapabilitiesResponse)
    async def get_capabilities(
        file_id: int,
        user: UserBase = Depends(current_user),
    ) -> CapabilitiesResponse:
        try:
            caps = await service.get_effective_capabilities(user, file_id)
        except ShareGateError as e:
            raise _http_error(e) from e
        return CapabilitiesResponse.from_capabilities(caps)

    @router.post(
        "/files/{file_id}/permissions",
        response_model=GrantResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def create_permission(
        file_id: int,
        body: GrantRequest,
        user: UserBase = Depends(current_user),
    ) -> GrantResponse:
        try:
            grant = await service.mutate_grant(
                user, file_id, body.user_id, body.to_capabilities()
            )
        except ShareGateError as e:
            raise _http_error(e) from e
        return GrantResponse.from_grant(grant)

    @router.put("/files/{file_id}/permissions/{user_id}", response_model=GrantResponse)
    async def replace_permission(
        file_id: int,
        user_id: int,
        body: CapabilitiesRequest,
        user: UserBase = Depends(current_user),
    ) -> GrantResponse:
        try:
            grant = await service.mutate_grant(user, file_id, user_id, body.to_capabilities())
        except ShareGateError as e:
            raise _http_error(e) from e
        return GrantResponse.from_grant(grant)

    @router.delete(
        "/files/{file_id}/permissions/{user_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def delete_permission(
        file_id: int,
        user_id: int,
        user: UserBase = Depends(current_user),
    ) -> None:
        try:
            await service.revoke_grant(user, file_id, user_id)
        except ShareGateError as e:
            raise _http_error(e) from e

    @router.websocket("/ws")
    async def permission_feed(websocket: WebSocket) -> None:
        await websocket.accept()
        channel = WebSocketChannel(websocket)
        service.subscribe(channel)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            service.unsubscribe(channel)
            logger.debug("Permission feed closed for %r", channel)

    return router
