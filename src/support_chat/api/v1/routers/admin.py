from __future__ import annotations

from fastapi import APIRouter, Query

from support_chat.api.deps import CurrentAdmin, UoWDep
from support_chat.api.v1.schemas.admin import StatsResponse
from support_chat.api.v1.schemas.conversation import ConversationSummaryResponse
from support_chat.services import admin_service

router = APIRouter(prefix="/api/v1/chat/admin", tags=["admin"])


@router.get("/conversations", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    admin: CurrentAdmin,
    uow: UoWDep,
) -> list[ConversationSummaryResponse]:
    summaries = await admin_service.list_admin_conversations(admin.user_id, uow)
    return [ConversationSummaryResponse.from_summary(s) for s in summaries]


@router.get("/stats", response_model=StatsResponse)
async def stats(
    admin: CurrentAdmin,
    uow: UoWDep,
    all_conversations: bool = Query(False, alias="all"),
) -> StatsResponse:
    result = await admin_service.get_stats(
        None if all_conversations else admin.user_id, uow,
    )
    return StatsResponse.model_validate(result)
