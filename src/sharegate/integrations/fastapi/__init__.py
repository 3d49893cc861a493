"""sharegate integration with FastAPI.

Provides ``create_router`` (grant routes plus the ``/ws`` change feed)
and ``WebSocketChannel`` (a ``Channel`` backed by a Starlette websocket).

Usage::

    from fastapi import FastAPI
    from sharegate import SharingService
    from sharegate.integrations.fastapi import create_router

    service = await SharingService.from_engine(engine)
    app = FastAPI()
    app.include_router(create_router(service, get_current_user))
"""

try:
    from fastapi import APIRouter as _APIRouter
except ImportError as _exc:
    raise ImportError(
        "fastapi is required for the sharegate FastAPI integration. "
        "Install it with: pip install 'sharegate[fastapi]'"
    ) from _exc

from sharegate.integrations.fastapi._channel import WebSocketChannel
from sharegate.integrations.fastapi._router import create_router
from sharegate.integrations.fastapi._schemas import (
    CapabilitiesRequest,
    CapabilitiesResponse,
    GrantRequest,
    GrantResponse,
)

__all__ = [
    "CapabilitiesRequest",
    "CapabilitiesResponse",
    "GrantRequest",
    "GrantResponse",
    "WebSocketChannel",
    "create_router",
]
