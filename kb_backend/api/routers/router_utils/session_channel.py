"""
Outbound side of a query WebSocket.

Serializes frame sends so concurrent query tasks and the cancel handler
never interleave writes, and stops sending once the peer is gone.

Dependencies: fastapi
System role: Session Channel
"""

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect

from kb_backend.models.streaming import Frame

logger = logging.getLogger(__name__)


class SessionChannel:
    """Lock-guarded frame sender for one WebSocket connection."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Mark the channel closed; later sends are dropped."""
        self._closed = True

    async def send(self, frame: Frame) -> bool:
        """
        Send one frame.

        Returns:
            bool: False when the connection is closed and the frame was dropped
        """
        async with self._lock:
            if self._closed:
                return False
            try:
                await self._websocket.send_json(frame.to_dict())
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.info(f"{__name__}:send - Connection closed, dropping frames: {type(e).__name__}")
                self._closed = True
                return False
        return True
