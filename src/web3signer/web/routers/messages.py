from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from web3signer.core.modules.message.models import MessageOrderField, MessageView, SortOrder
from web3signer.web.deps import AppDep, SessionIdDep
from web3signer.web.openapi import ApiResponse, ErrorResponse, MessageResponse

router = APIRouter(tags=["messages"])


class ListMessagesRequest(BaseModel):
    """Paging and ordering of the message history."""

    page: int = Field(1, description="1-based page number")
    limit: int = Field(10, description="Messages per page (1-100)")
    order_by: MessageOrderField = Field(MessageOrderField.CREATED_AT, alias="orderBy")
    order: SortOrder = Field(SortOrder.DESC)

    model_config = ConfigDict(populate_by_name=True)


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total_count: int = Field(..., alias="totalCount")
    total_pages: int = Field(..., alias="totalPages")
    has_next_page: bool = Field(..., alias="hasNextPage")
    has_prev_page: bool = Field(..., alias="hasPrevPage")

    model_config = ConfigDict(populate_by_name=True)


class MessagesResponse(ApiResponse):
    """Page of recorded messages."""

    messages: list[MessageView]
    pagination: PaginationMeta


class MessageDetailResponse(ApiResponse):
    """Single recorded message."""

    message: MessageView


@router.post(
    "/messages",
    summary="List recorded messages",
    description="Get a page of the messages the current user has verified.",
    operation_id="listMessages",
    responses={
        200: {"description": "Page of messages"},
        400: {"model": ErrorResponse, "description": "Invalid paging parameters"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_messages(
    app: AppDep, session_id: SessionIdDep, request_data: ListMessagesRequest | None = None
) -> MessagesResponse:
    params = request_data or ListMessagesRequest()
    result = await app.get_messages(session_id, params.page, params.limit, params.order_by, params.order)
    return MessagesResponse(
        messages=result.items,
        pagination=PaginationMeta(
            page=params.page,
            limit=result.limit,
            total_count=result.total,
            total_pages=result.total_pages,
            has_next_page=result.has_more,
            has_prev_page=params.page > 1,
        ),
    )


@router.get(
    "/messages/{message_id}",
    summary="Get recorded message",
    operation_id="getMessage",
    responses={
        200: {"description": "Message"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Message not found"},
    },
)
async def get_message(message_id: int, app: AppDep, session_id: SessionIdDep) -> MessageDetailResponse:
    return MessageDetailResponse(message=await app.get_message(session_id, message_id))


@router.delete(
    "/messages/{message_id}",
    summary="Delete recorded message",
    operation_id="deleteMessage",
    responses={
        200: {"description": "Message deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Message not found"},
    },
)
async def delete_message(message_id: int, app: AppDep, session_id: SessionIdDep) -> MessageResponse:
    await app.delete_message(session_id, message_id)
    return MessageResponse(message="Message deleted successfully")
