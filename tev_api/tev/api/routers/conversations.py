from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from tev import conversations as convo_service
from tev.api.auth import require_api_key
from tev.api.deps import get_repo
from tev.api.schemas import Conversation, ConversationMessage
from tev.db.repo import Repo

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)], tags=["conversations"])


@router.get("/conversations/{blog}", response_model=List[Conversation])
def list_conversations(blog: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return convo_service.list_conversations(repo, blog)


@router.post("/conversations/{blog}", response_model=Conversation)
def create_conversation(blog: str, payload: Conversation, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return convo_service.create_conversation(repo, blog, payload.model_dump(exclude={"id"}))


@router.delete("/conversations/{blog}")
def delete_all_conversations(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "deleted": convo_service.delete_all_conversations(repo, blog)}


@router.get("/conversations/{blog}/unhidden", response_model=List[Conversation])
def list_unhidden_conversations(blog: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return convo_service.list_conversations(repo, blog, hidden=False)


@router.get("/conversations/{blog}/hidden", response_model=List[Conversation])
def list_hidden_conversations(blog: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return convo_service.list_conversations(repo, blog, hidden=True)


@router.put("/conversations/{blog}/unignoreAllConversations")
def unignore_all_conversations(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "updated": convo_service.unhide_all(repo, blog)}


@router.get("/conversations/{blog}/byParticipant/{participant}", response_model=Conversation)
def get_by_participant(blog: str, participant: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return convo_service.by_participant(repo, blog, participant)


@router.get("/conversations/{blog}/byParticipantIdOrName/{participant_id}/{participant}", response_model=Conversation)
def get_by_participant_id_or_name(
    blog: str,
    participant_id: str,
    participant: str,
    repo: Repo = Depends(get_repo),
) -> Dict[str, Any]:
    return convo_service.by_participant_id_or_name(repo, blog, participant_id, participant)


# ---- messages (before /{conversation_id} so "messages" is not taken for an id) ----

@router.get("/conversations/{blog}/messages", response_model=List[ConversationMessage])
def list_blog_messages(blog: str, repo: Repo = Depends(get_repo)) -> List[Dict[str, Any]]:
    return convo_service.list_messages_for_blog(repo, blog)


@router.post("/conversations/{blog}/messages", response_model=ConversationMessage)
def create_message(blog: str, payload: ConversationMessage, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return convo_service.create_message(repo, blog, payload.model_dump(exclude={"id"}))


@router.delete("/conversations/{blog}/messages")
def delete_all_messages(blog: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return {"ok": True, "deleted": convo_service.delete_all_messages(repo, blog)}


@router.get("/conversations/{blog}/messages/{message_id}", response_model=ConversationMessage)
def get_message(blog: str, message_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return convo_service.get_message(repo, blog, message_id)


@router.put("/conversations/{blog}/messages/{message_id}", response_model=ConversationMessage)
def update_message(
    blog: str,
    message_id: int,
    payload: ConversationMessage,
    repo: Repo = Depends(get_repo),
) -> Dict[str, Any]:
    return convo_service.update_message(repo, blog, message_id, payload.model_dump(exclude_unset=True))


@router.delete("/conversations/{blog}/messages/{message_id}")
def delete_message(blog: str, message_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    convo_service.delete_message(repo, blog, message_id)
    return {"ok": True, "id": message_id}


# ---- single conversation ----

@router.get("/conversations/{blog}/{conversation_id}", response_model=Conversation)
def get_conversation(blog: str, conversation_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return convo_service.get_conversation(repo, blog, conversation_id)


@router.put("/conversations/{blog}/{conversation_id}", response_model=Conversation)
def update_conversation(
    blog: str,
    conversation_id: int,
    payload: Conversation,
    repo: Repo = Depends(get_repo),
) -> Dict[str, Any]:
    return convo_service.update_conversation(repo, blog, conversation_id, payload.model_dump(exclude_unset=True))


@router.delete("/conversations/{blog}/{conversation_id}")
def delete_conversation(blog: str, conversation_id: int, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    convo_service.delete_conversation(repo, blog, conversation_id)
    return {"ok": True, "id": conversation_id}


@router.get("/conversations/{blog}/{conversation_id}/messages", response_model=List[ConversationMessage])
def list_conversation_messages(
    blog: str,
    conversation_id: int,
    repo: Repo = Depends(get_repo),
) -> List[Dict[str, Any]]:
    return convo_service.list_messages(repo, blog, conversation_id)


@router.put("/conversations/{blog}/{participant}/ignoreConvo", response_model=Conversation)
def ignore_conversation(blog: str, participant: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return convo_service.set_hidden(repo, blog, participant, True)


@router.put("/conversations/{blog}/{participant}/unignoreConvo", response_model=Conversation)
def unignore_conversation(blog: str, participant: str, repo: Repo = Depends(get_repo)) -> Dict[str, Any]:
    return convo_service.set_hidden(repo, blog, participant, False)
