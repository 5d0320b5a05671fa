"""Realtime endpoints: the event stream and the signals relayed through it."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from support_chat.api.deps import RegistryDep, UoWDep, authenticate
from support_chat.api.v1.schemas.chat import MarkReadRequest, OnlineUsersResponse, TypingRequest
from support_chat.api.v1.schemas.common import SuccessResponse
from support_chat.application.exceptions import ForbiddenError, NotFoundError
from support_chat.application.ports.bus import ADMIN_AUDIENCE, conversation_key, user_key
from support_chat.config import settings
from support_chat.infrastructure.realtime.connection import ClientConnection
from support_chat.infrastructure.realtime.stream import SSE_HEADERS, sse_frames
from support_chat.services import conversation_service, read_state_service, typing_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.get("/stream")
async def stream(
    request: Request,
    registry: RegistryDep,
    uow: UoWDep,
    token: str = Query(...),
    conversation_id: str | None = Query(None, alias="conversationId"),
) -> StreamingResponse:
    principal = await authenticate(token)

    keys = [user_key(principal.user_id)]
    if principal.is_admin:
        keys.append(ADMIN_AUDIENCE)
    if conversation_id:
        try:
            await conversation_service.get_conversation(conversation_id, principal, uow)
        except ForbiddenError as exc:
            # Do not reveal that the conversation exists.
            raise NotFoundError("Conversation not found") from exc
        finally:
            # The stream outlives the request; hand the pooled connection back now.
            await uow.rollback()
        keys.append(conversation_key(conversation_id))

    connection = ClientConnection(
        principal.user_id,
        is_admin=principal.is_admin,
        max_queue=settings.SSE_QUEUE_SIZE,
    )
    logger.info("Stream opened for user %s on %s", principal.user_id, keys)
    return StreamingResponse(
        sse_frames(
            registry,
            connection,
            keys,
            heartbeat=settings.SSE_HEARTBEAT_SECONDS,
            is_disconnected=request.is_disconnected,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/typing", response_model=SuccessResponse)
async def typing(body: TypingRequest, registry: RegistryDep) -> SuccessResponse:
    typing_service.set_typing(
        body.conversation_id,
        body.user_id,
        body.is_typing,
        body.user_name,
        registry,
        origin_connection=body.connection_id,
    )
    return SuccessResponse()


@router.post("/messages/mark-read", response_model=SuccessResponse)
async def mark_read(
    body: MarkReadRequest,
    registry: RegistryDep,
    uow: UoWDep,
) -> SuccessResponse:
    await read_state_service.mark_read(body.conversation_id, body.user_id, uow, registry)
    return SuccessResponse()


@router.get("/online-users", response_model=OnlineUsersResponse)
async def online_users(registry: RegistryDep) -> OnlineUsersResponse:
    return OnlineUsersResponse(online_users=registry.online_users())
