"""WebSocketChannel — delivers change events over a websocket."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi import WebSocket


class WebSocketChannel:
    """``Channel`` wrapping an accepted websocket.  Hashes by identity."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    async def send(self, payload: dict[str, Any]) -> None:
        await self.websocket.send_json(payload)

    def __repr__(self) -> str:
        client = self.websocket.client
        where = f"{client.host}:{client.port}" if client else "unknown"
        return f"WebSocketChannel({where})"
