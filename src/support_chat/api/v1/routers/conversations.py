from __future__ import annotations

from fastapi import APIRouter, Response, status

from support_chat.api.deps import CurrentPrincipal, UoWDep
from support_chat.api.v1.schemas.conversation import (
    ConversationResponse,
    ConversationSummaryResponse,
    OpenConversationRequest,
)
from support_chat.config import settings
from support_chat.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.post("", response_model=ConversationResponse)
async def open_conversation(
    body: OpenConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    response: Response,
) -> ConversationResponse:
    conv, created = await conversation_service.open_conversation(
        principal,
        body.participant_id,
        uow,
        support_admin_id=settings.SUPPORT_ADMIN_ID,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ConversationResponse.model_validate(conv)


@router.get("", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationSummaryResponse]:
    summaries = await conversation_service.list_user_conversations(principal, uow)
    return [ConversationSummaryResponse.from_summary(s) for s in summaries]


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.get_conversation(conversation_id, principal, uow)
    return ConversationResponse.model_validate(conv)
