"""
WebSocket query streaming endpoint.

Routes: WS /ws/query

Client sends:
    {"sessionId": "...", "query": "..."}
    {"type": "cancel", "sessionId": "..."}

Server sends:
    {"type": "chunk", "data": "..."}
    {"type": "done", "sources": [{"content": "...", "metadata": {...}}]}
    {"type": "cancelled", "message": "Request cancelled successfully"}
    {"error": "..."}

Dependencies: kb_backend.application.services.query_service
System role: WebSocket streaming API
"""

import asyncio
import logging
from contextlib import aclosing

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from kb_backend.api.deps import get_cancellation_controller, get_query_service
from kb_backend.api.routers.router_utils.session_channel import SessionChannel
from kb_backend.application.services.query_service import QueryService
from kb_backend.core.exceptions import InvalidClientMessageError
from kb_backend.core.session.cancellation import CancellationController
from kb_backend.core.session.state import Session
from kb_backend.models.streaming import (
    ClientCancelMessage,
    ClientQueryMessage,
    ErrorFrame,
    parse_client_message,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["query"])


async def run_query(
    query_service: QueryService,
    session: Session,
    channel: SessionChannel,
    message: ClientQueryMessage,
) -> None:
    """Stream one query's frames to the channel until done, error or cancel."""
    async with aclosing(query_service.stream_query(session, message.query, message.session_id)) as frames:
        async for frame in frames:
            if not await channel.send(frame):
                break


@router.websocket("/ws/query")
async def websocket_query(
    websocket: WebSocket,
    query_service: QueryService = Depends(get_query_service),
    controller: CancellationController = Depends(get_cancellation_controller),
) -> None:
    """
    Streaming query endpoint.

    Queries run as tasks so cancel messages are read while an answer is
    streaming. Disconnecting cancels the session and every running query.

    Args:
        websocket: WebSocket connection
        query_service: Injected query service
        controller: Injected cancellation controller
    """
    await websocket.accept()
    session = Session()
    channel = SessionChannel(websocket)
    tasks: set[asyncio.Task] = set()
    logger.info(
        "WebSocket connection established",
        extra={"connection_id": session.connection_id, "client_host": websocket.client},
    )

    try:
        while True:
            raw_data = await websocket.receive_text()

            try:
                message = parse_client_message(raw_data)
            except InvalidClientMessageError as e:
                logger.warning(
                    "Rejected client message",
                    extra={"connection_id": session.connection_id, "error_msg": e.message},
                )
                await channel.send(ErrorFrame(error=e.message))
                continue

            if isinstance(message, ClientCancelMessage):
                await channel.send(controller.cancel(session, message.session_id))
                continue

            task = asyncio.create_task(run_query(query_service, session, channel, message))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
            # Let the task start its request before the next message is read
            await asyncio.sleep(0)

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected", extra={"connection_id": session.connection_id})
    finally:
        channel.close()
        controller.cancel(session)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
