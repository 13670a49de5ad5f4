from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from tev.db.repo import Repo
from tev.metadata import metadata_for_blog_or_default
from tev.xml.common import XmlSource
from tev.xml.conversation_reader import read_conversations

log = logging.getLogger(__name__)


@dataclass
class ImportConversationsResult:
    blog: str
    main_participant: Optional[str] = None
    conversations: int = 0
    created: int = 0
    merged: int = 0
    messages_added: int = 0
    overwritten: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _message_key(m: Dict[str, Any]) -> tuple:
    return (m.get("timestamp"), m.get("type"), m.get("message"), bool(m.get("received")))


def _find_existing(repo: Repo, blog: str, convo: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if convo.get("participant_id"):
        found = repo.find_conversation_by_participant_id(blog, convo["participant_id"])
        if found is not None:
            return found
    by_name = repo.find_conversations_by_participant(blog, convo["participant"])
    return by_name[0] if by_name else None


def _insert(repo: Repo, convo: Dict[str, Any]) -> int:
    conversation_id = repo.insert_conversation(convo)
    for m in convo["messages"]:
        repo.insert_message(dict(m, conversation_id=conversation_id))
    return conversation_id


def _merge(repo: Repo, existing: Dict[str, Any], convo: Dict[str, Any]) -> int:
    known = {_message_key(m) for m in repo.list_messages(existing["id"])}
    added = 0
    for m in convo["messages"]:
        if _message_key(m) in known:
            continue
        repo.insert_message(dict(m, conversation_id=existing["id"]))
        known.add(_message_key(m))
        added += 1

    updated = dict(existing)
    updated["participant"] = convo["participant"] or existing["participant"]
    updated["participant_avatar_url"] = convo["participant_avatar_url"] or existing["participant_avatar_url"]
    updated["participant_id"] = convo["participant_id"] or existing["participant_id"]
    repo.update_conversation(existing["id"], updated)
    repo.refresh_message_count(existing["id"])
    return added


def import_conversations(repo: Repo, blog: str, source: XmlSource) -> ImportConversationsResult:
    """Import a Tumblr messages export into a blog.

    With overwrite_convo_data set on the blog every conversation is replaced;
    otherwise conversations are merged into the existing ones and only unseen
    messages are added.
    """
    md = metadata_for_blog_or_default(repo, blog)
    parsed = read_conversations(source, blog, md.get("main_tumblr_user"))

    res = ImportConversationsResult(
        blog=blog,
        main_participant=parsed.main_name,
        conversations=len(parsed.conversations),
        overwritten=bool(md["overwrite_convo_data"]),
    )

    with repo.conn():
        if parsed.main_name:
            repo.set_main_user(blog, parsed.main_name, parsed.main_avatar_url)

        if res.overwritten:
            repo.delete_conversations_for_blog(blog)
            log.info("Overwriting conversation data for blog=%s", blog)

        for convo in parsed.conversations:
            existing = None if res.overwritten else _find_existing(repo, blog, convo)
            if existing is None:
                _insert(repo, convo)
                res.created += 1
                res.messages_added += len(convo["messages"])
            else:
                res.messages_added += _merge(repo, existing, convo)
                res.merged += 1

    log.info(
        "Imported conversations for blog=%s: total=%s created=%s merged=%s messages_added=%s",
        blog,
        res.conversations,
        res.created,
        res.merged,
        res.messages_added,
    )
    return res
