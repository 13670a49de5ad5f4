from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from tev.db.repo import CONVERSATION_COLUMNS, MESSAGE_COLUMNS, Repo
from tev.errors import InvalidConvoParentError, ResourceNotFoundError

log = logging.getLogger(__name__)


def list_conversations(repo: Repo, blog: str, hidden: Optional[bool] = None) -> List[Dict[str, Any]]:
    return repo.list_conversations(blog, hidden)


def get_conversation(repo: Repo, blog: str, conversation_id: int) -> Dict[str, Any]:
    c = repo.get_conversation(conversation_id)
    if c is None or c["blog"] != blog:
        raise ResourceNotFoundError("Conversation", "id", conversation_id)
    return c


def by_participant(repo: Repo, blog: str, participant: str) -> Dict[str, Any]:
    found = repo.find_conversations_by_participant(blog, participant)
    if not found:
        raise ResourceNotFoundError("Conversation", "participant", participant)
    return found[0]


def by_participant_id_or_name(repo: Repo, blog: str, participant_id: str, participant: str) -> Dict[str, Any]:
    c = repo.find_conversation_by_participant_id(blog, participant_id) if participant_id else None
    if c is not None:
        return c
    return by_participant(repo, blog, participant)


def create_conversation(repo: Repo, blog: str, data: Dict[str, Any]) -> Dict[str, Any]:
    row = {c: data.get(c) for c in CONVERSATION_COLUMNS}
    row["blog"] = blog
    with repo.conn():
        conversation_id = repo.insert_conversation(row)
    return repo.get_conversation(conversation_id)


def update_conversation(repo: Repo, blog: str, conversation_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    current = get_conversation(repo, blog, conversation_id)
    current.update({c: data[c] for c in CONVERSATION_COLUMNS if c in data and data[c] is not None})
    current["blog"] = blog
    with repo.conn():
        repo.update_conversation(conversation_id, current)
    return repo.get_conversation(conversation_id)


def set_hidden(repo: Repo, blog: str, participant: str, hidden: bool) -> Dict[str, Any]:
    with repo.conn():
        n = repo.set_conversation_hidden(blog, participant, hidden)
    if n == 0:
        raise ResourceNotFoundError("Conversation", "participant", participant)
    return by_participant(repo, blog, participant)


def unhide_all(repo: Repo, blog: str) -> int:
    with repo.conn():
        return repo.unhide_all_conversations(blog)


def delete_conversation(repo: Repo, blog: str, conversation_id: int) -> None:
    get_conversation(repo, blog, conversation_id)
    with repo.conn():
        repo.delete_conversation(conversation_id)


def delete_all_conversations(repo: Repo, blog: str) -> int:
    with repo.conn():
        n = repo.delete_conversations_for_blog(blog)
    log.info("Deleted %s conversations of blog=%s", n, blog)
    return n


# -------- messages --------

def list_messages_for_blog(repo: Repo, blog: str) -> List[Dict[str, Any]]:
    return repo.list_messages_for_blog(blog)


def list_messages(repo: Repo, blog: str, conversation_id: int) -> List[Dict[str, Any]]:
    get_conversation(repo, blog, conversation_id)
    return repo.list_messages(conversation_id)


def _parent_of(repo: Repo, blog: str, conversation_id: Any) -> Dict[str, Any]:
    c = repo.get_conversation(conversation_id) if conversation_id is not None else None
    if c is None:
        raise ResourceNotFoundError("Conversation", "id", conversation_id)
    if c["blog"] != blog:
        raise InvalidConvoParentError(blog, conversation_id)
    return c


def get_message(repo: Repo, blog: str, message_id: int) -> Dict[str, Any]:
    m = repo.get_message(message_id)
    if m is None:
        raise ResourceNotFoundError("ConversationMessage", "id", message_id)
    _parent_of(repo, blog, m["conversation_id"])
    return m


def create_message(repo: Repo, blog: str, data: Dict[str, Any]) -> Dict[str, Any]:
    _parent_of(repo, blog, data.get("conversation_id"))
    row = {c: data.get(c) for c in MESSAGE_COLUMNS}
    with repo.conn():
        message_id = repo.insert_message(row)
        repo.refresh_message_count(row["conversation_id"])
    return repo.get_message(message_id)


def update_message(repo: Repo, blog: str, message_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    current = get_message(repo, blog, message_id)
    previous_parent = current["conversation_id"]
    current.update({c: data[c] for c in MESSAGE_COLUMNS if c in data and data[c] is not None})
    _parent_of(repo, blog, current["conversation_id"])
    with repo.conn():
        repo.update_message(message_id, current)
        if current["conversation_id"] != previous_parent:
            repo.refresh_message_count(previous_parent)
            repo.refresh_message_count(current["conversation_id"])
    return repo.get_message(message_id)


def delete_message(repo: Repo, blog: str, message_id: int) -> None:
    m = get_message(repo, blog, message_id)
    with repo.conn():
        repo.delete_message(message_id)
        repo.refresh_message_count(m["conversation_id"])


def delete_all_messages(repo: Repo, blog: str) -> int:
    with repo.conn():
        return repo.delete_messages_for_blog(blog)
