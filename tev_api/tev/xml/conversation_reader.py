"""Reader for the messages.xml file of a Tumblr export.

The export lists conversations with their participants (names + avatars) and
messages tagged with opaque participant ids. Which name and which id belong
to the exporting blog has to be inferred:

* the main name is the expected blog name if any conversation mentions it,
  otherwise the name shared by every conversation (that case is a mismatch);
* the main id is the sender id appearing in the most conversations.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple
from xml.etree import ElementTree as ET

from tev.errors import BlogMismatchParsingError, XmlParsingError
from tev.xml.common import XmlSource, open_source, to_int

log = logging.getLogger(__name__)

MESSAGE_TYPES = ("TEXT", "IMAGE", "POSTREF")

_DEACT_RE = re.compile(r"-deact.*$")


def fix_participant_name(name: Optional[str]) -> str:
    """Deactivated blogs show up as 'name-deactivated20180101'; keep 'name'."""
    return _DEACT_RE.sub("", (name or "").strip())


@dataclass
class RawConversation:
    participants: List[Tuple[str, Optional[str]]] = field(default_factory=list)
    messages: List[Dict[str, Any]] = field(default_factory=list)

    def names(self) -> List[str]:
        return [n for n, _ in self.participants]

    def sender_ids(self) -> List[str]:
        seen: List[str] = []
        for m in self.messages:
            pid = m.get("participant_id")
            if pid and pid not in seen:
                seen.append(pid)
        return seen


@dataclass
class ParsedConversations:
    main_name: Optional[str]
    main_avatar_url: Optional[str]
    main_id: Optional[str]
    conversations: List[Dict[str, Any]]


def _message_text(elem: ET.Element, msg_type: str) -> str:
    if msg_type == "IMAGE":
        url = elem.findtext("photo-url")
        if url is not None:
            return url.strip()
    return "".join(elem.itertext()).strip()


def _parse_conversation(elem: ET.Element) -> RawConversation:
    raw = RawConversation()
    for p in elem.findall("participants/participant"):
        raw.participants.append(((p.text or "").strip(), p.get("avatar_url")))
    for m in elem.findall("messages/message"):
        msg_type = (m.get("type") or "TEXT").strip().upper()
        if msg_type not in MESSAGE_TYPES:
            log.warning("Unknown message type %r; storing as TEXT", msg_type)
            msg_type = "TEXT"
        raw.messages.append(
            {
                "timestamp": to_int(m.get("ts")),
                "participant_id": (m.get("participant") or "").strip() or None,
                "type": msg_type,
                "message": _message_text(m, msg_type),
            }
        )
    return raw


def read_raw_conversations(source: XmlSource) -> List[RawConversation]:
    out: List[RawConversation] = []
    try:
        for _event, elem in ET.iterparse(open_source(source), events=("end",)):
            if elem.tag != "conversation":
                continue
            out.append(_parse_conversation(elem))
            elem.clear()
    except ET.ParseError as e:
        raise XmlParsingError(f"Malformed conversations XML: {e}") from e
    return out


def _find_main_name(raws: List[RawConversation], blog: str, expected: Iterable[str]) -> str:
    expected = [e for e in expected if e]
    for raw in raws:
        for name in raw.names():
            if name in expected:
                return name

    common = set(raws[0].names())
    for raw in raws[1:]:
        common &= set(raw.names())
    if len(raws) > 1 and len(common) == 1:
        raise BlogMismatchParsingError(blog, common.pop())
    raise XmlParsingError(f"Unable to find the main participant for blog '{blog}'")


def _find_main_id(raws: List[RawConversation]) -> Optional[str]:
    counts: Counter = Counter()
    for raw in raws:
        counts.update(raw.sender_ids())
    if not counts:
        return None
    ranked = counts.most_common(2)
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        raise XmlParsingError("Unable to determine the participant id of the main blog")
    return ranked[0][0]


def resolve_conversations(
    raws: List[RawConversation],
    blog: str,
    main_user: Optional[str] = None,
) -> ParsedConversations:
    """Work out the main participant and turn raw conversations into rows.

    Each returned conversation dict carries a ``messages`` list; ``received``
    is False for messages sent by the main participant.
    """
    if not raws:
        return ParsedConversations(None, None, None, [])

    main_name = _find_main_name(raws, blog, [main_user or "", blog])
    main_avatar = None
    for raw in raws:
        for name, avatar in raw.participants:
            if name == main_name and avatar:
                main_avatar = avatar
                break
        if main_avatar:
            break

    main_id = _find_main_id(raws)
    log.debug("Main participant for blog=%s: name=%s id=%s", blog, main_name, main_id)

    conversations: List[Dict[str, Any]] = []
    for raw in raws:
        others = [(n, a) for n, a in raw.participants if n != main_name]
        name, avatar = others[0] if others else (main_name, main_avatar)
        other_ids = [pid for pid in raw.sender_ids() if pid != main_id]

        messages = [
            {
                "timestamp": m["timestamp"],
                "received": m["participant_id"] != main_id,
                "type": m["type"],
                "message": m["message"],
            }
            for m in raw.messages
        ]
        conversations.append(
            {
                "blog": blog,
                "participant": fix_participant_name(name),
                "participant_avatar_url": avatar,
                "participant_id": other_ids[0] if other_ids else None,
                "num_messages": len(messages),
                "hide_conversation": False,
                "messages": messages,
            }
        )

    return ParsedConversations(main_name, main_avatar, main_id, conversations)


def read_conversations(source: XmlSource, blog: str, main_user: Optional[str] = None) -> ParsedConversations:
    return resolve_conversations(read_raw_conversations(source), blog, main_user)
