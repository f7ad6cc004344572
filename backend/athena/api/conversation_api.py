from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from athena.api.dependencies import get_conversation_repository
from athena.middleware.auth_middleware import get_current_user_id
from athena.models.conversation import (
    ConversationResponse,
    CreateConversationRequest,
    CreateMessageRequest,
    MessageResponse,
)
from athena.repository.conversation_repository import ConversationRepository

router = APIRouter()

NOT_FOUND = "Conversation not found"


def _message_response(doc: Dict[str, Any]) -> MessageResponse:
    return MessageResponse(
        id=doc["_id"],
        conversation_id=doc["conversation_id"],
        role=doc["role"],
        content=doc["content"],
        metadata=doc.get("metadata"),
        created_at=doc["created_at"]
    )


def _conversation_response(doc: Dict[str, Any]) -> ConversationResponse:
    return ConversationResponse(
        id=doc["_id"],
        user_id=doc["user_id"],
        title=doc["title"],
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
        messages=[_message_response(m) for m in doc.get("messages", [])]
    )


def _require_owned(repo: ConversationRepository, conversation_id: int, user_id: str) -> Dict[str, Any]:
    conversation = repo.find_owned(conversation_id, user_id)
    if not conversation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return conversation


@router.get("", response_model=List[ConversationResponse])
async def list_conversations(
    user_id: str = Depends(get_current_user_id),
    repo: ConversationRepository = Depends(get_conversation_repository)
):
    """The user's conversations, most recently updated first, with their messages."""
    return [_conversation_response(c) for c in repo.list_for_user(user_id)]


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    data: CreateConversationRequest,
    user_id: str = Depends(get_current_user_id),
    repo: ConversationRepository = Depends(get_conversation_repository)
):
    return _conversation_response(repo.create(user_id, data.title))


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    repo: ConversationRepository = Depends(get_conversation_repository)
):
    if not repo.delete(conversation_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return {"success": True}


@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    repo: ConversationRepository = Depends(get_conversation_repository)
):
    _require_owned(repo, conversation_id, user_id)
    return [_message_response(m) for m in repo.list_messages(conversation_id)]


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def add_message(
    conversation_id: int,
    data: CreateMessageRequest,
    user_id: str = Depends(get_current_user_id),
    repo: ConversationRepository = Depends(get_conversation_repository)
):
    """Save a message to one of the user's conversations and bump its updated_at."""
    _require_owned(repo, conversation_id, user_id)
    message = repo.add_message(conversation_id, data.role.value, data.content, data.metadata)
    return _message_response(message)
