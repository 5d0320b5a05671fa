"""Legacy global socket: every message is rebroadcast to every peer."""
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from support_chat.config import settings
from support_chat.domain.value_objects.enums import EventType
from support_chat.infrastructure.realtime.connection import ClientConnection
from support_chat.infrastructure.ws.manager import GLOBAL_KEY, GlobalSocketHub
from support_chat.infrastructure.ws.protocol import WsInbound, WsOutbound

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

hub = GlobalSocketHub()


def get_hub() -> GlobalSocketHub:
    return hub


@router.websocket("/socket")
async def socket(websocket: WebSocket) -> None:
    await websocket.accept()
    conn = ClientConnection(f"socket:{id(websocket):x}")
    hub.connect(conn)

    writer_task = asyncio.create_task(
        _writer(websocket, conn), name=f"ws-writer-{conn.id}",
    )
    try:
        await _read_loop(websocket, conn)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Socket error for %r", conn)
    finally:
        hub.disconnect(conn)
        writer_task.cancel()


async def _writer(ws: WebSocket, conn: ClientConnection) -> None:
    try:
        async for event in conn.events(settings.WS_HEARTBEAT_SECONDS):
            if event.get("type") == EventType.PING.value:
                out = WsOutbound(type="keepalive", data={})
            else:
                out = WsOutbound(type=event["type"], data=event.get("data"))
            await ws.send_text(out.model_dump_json())
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Socket writer stopped for %r", conn, exc_info=True)
        hub.disconnect(conn)


async def _read_loop(ws: WebSocket, conn: ClientConnection) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except PydanticValidationError:
            conn.send(
                WsOutbound(type="error", data={"code": "invalid_payload"}).model_dump()
            )
            continue

        if msg.type == "send_message":
            delivered = hub.publish(
                [GLOBAL_KEY], {"type": "receive_message", "data": msg.data},
            )
            logger.debug("Relayed socket message to %d peers", delivered)

        elif msg.type == "ping":
            conn.send(WsOutbound(type="pong", data={}).model_dump())

        else:
            conn.send(
                WsOutbound(type="error", data={"code": "unknown_type", "type": msg.type}).model_dump()
            )
