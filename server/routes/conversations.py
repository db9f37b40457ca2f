"""Conversation endpoints: list, read messages, delete."""

from fastapi import APIRouter, Depends, HTTPException, status

from server.dependencies import get_api_key, get_store
from server.schemas.responses import ConversationDTO, MessageDTO

router = APIRouter(prefix="/v1", tags=["Conversations"])


@router.get("/conversations", response_model=list[ConversationDTO])
async def list_conversations(
    api_key: str = Depends(get_api_key),
    store=Depends(get_store),
):
    """Return conversations, most recently updated first."""
    return [ConversationDTO.from_conversation(c) for c in store.list_conversations()]


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageDTO])
async def list_messages(
    conversation_id: str,
    api_key: str = Depends(get_api_key),
    store=Depends(get_store),
):
    if store.get_conversation(conversation_id) is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return [MessageDTO.from_message(m) for m in store.get_messages(conversation_id)]


@router.delete("/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: str,
    api_key: str = Depends(get_api_key),
    store=Depends(get_store),
):
    """Delete a conversation and its messages."""
    if not store.delete_conversation(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
