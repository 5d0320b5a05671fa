from __future__ import annotations

from fastapi import APIRouter, Query, Response

from support_chat.api.deps import CurrentPrincipal, RegistryDep, UoWDep
from support_chat.api.v1.schemas.message import MessageResponse, SendMessageRequest
from support_chat.infrastructure.db.repositories._cursor import encode_cursor
from support_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["messages"])

NEXT_CURSOR_HEADER = "X-Next-Cursor"


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
    response: Response,
    cursor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> list[MessageResponse]:
    messages = await message_service.list_messages(
        conversation_id, principal, cursor, limit, uow,
    )
    if len(messages) == limit:
        last = messages[-1]
        response.headers[NEXT_CURSOR_HEADER] = encode_cursor(last.created_at, last.id)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    conversation_id: str,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    registry: RegistryDep,
) -> MessageResponse:
    msg = await message_service.send_message(
        conversation_id,
        principal.user_id,
        body.content,
        uow,
        registry,
        client_msg_id=body.client_msg_id,
    )
    return MessageResponse.model_validate(msg)
