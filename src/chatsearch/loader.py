from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .config import VERBOSE

log = logging.getLogger(__name__)

# author keys seen across export flavours, in priority order
_AUTHOR_KEYS = ("from", "from_name", "fromName", "actor", "a")
_DATE_KEYS = ("date", "timestamp", "t")
# "message" is the MTProto client shape, "m" the compact export
_TEXT_KEYS = ("text", "message", "m")
_FORWARD_KEYS = ("forwarded_from", "forwardedFrom")
_CHAT_NAME_KEYS = ("name", "chat_name", "chat")


@dataclass(frozen=True, slots=True)
class Message:
    """
    One chat message as fed to the index.

    Attributes
    ----------
    id : int
        Message id from the export, or its position when the export has none.
    date : str
        Raw date string as exported (may be empty).
    text : str
        Flattened message text.
    author : str
        Display name of the sender (may be empty).
    source : str
        File the message was read from.
    chat : str
        Name of the chat the message belongs to (may be empty).
    forwarded_from : str
        Original sender of a forwarded message (may be empty).
    media_type : str
        Attachment kind such as "photo", "file" or "sticker" (may be empty).
    """
    id: int
    date: str
    text: str
    author: str
    source: str
    chat: str = ""
    forwarded_from: str = ""
    media_type: str = ""


def message_text(msg: Message) -> str:
    """Searchable text of a message: its text plus the author name, if any."""
    parts = [msg.text]
    if msg.author:
        parts.append(msg.author)
    return " ".join(parts)


def entities_text(value: Any) -> str:
    """Flatten a Telegram text value (str, or list of str / {"text": ...} entities)."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        out: List[str] = []
        for ent in value:
            if isinstance(ent, str):
                out.append(ent)
            elif isinstance(ent, dict):
                out.append(str(ent.get("text") or ""))
        return "".join(out)
    return ""


def _first(raw: Dict[str, Any], keys: Iterable[str]) -> str:
    for k in keys:
        v = raw.get(k)
        if v:
            return str(v)
    return ""


def _first_value(raw: Dict[str, Any], keys: Iterable[str]) -> Any:
    """First non-empty value under keys, without stringifying it."""
    for k in keys:
        v = raw.get(k)
        if v:
            return v
    return ""


def media_type(raw: Dict[str, Any]) -> str:
    """Attachment kind: explicit media_type, then media.type, then photo/file markers."""
    if raw.get("media_type"):
        return str(raw["media_type"])
    media = raw.get("media")
    if isinstance(media, dict):
        return str(media.get("type") or "")
    if raw.get("photo"):
        return "photo"
    if raw.get("file"):
        return "file"
    return ""


def _message_from_raw(raw: Dict[str, Any], pos: int, source: str, chat: str = "") -> Message:
    msg_id = raw.get("id")
    return Message(
        id=int(msg_id) if isinstance(msg_id, int) else pos,
        date=_first(raw, _DATE_KEYS),
        text=entities_text(_first_value(raw, _TEXT_KEYS)),
        author=_first(raw, _AUTHOR_KEYS),
        source=source,
        chat=chat,
        forwarded_from=_first(raw, _FORWARD_KEYS),
        media_type=media_type(raw),
    )


def parse_chat(data: Any, source: str = "") -> List[Message]:
    """
    Turn a decoded JSON export into messages.

    Supported shapes:
      * {"name": ..., "messages": [...]}          (Telegram Desktop, single chat)
      * {"chat": ..., "messages": [{"t","a","m"}]} (compact export)
      * {"chats": {"list": [chat, ...]}}          (Telegram Desktop, full account)
    Message text is read from "text", "message" or "m", whichever is first
    non-empty. Messages whose text is blank are dropped.
    """
    if not isinstance(data, dict):
        raise ValueError(f"{source or 'input'}: expected a JSON object, got {type(data).__name__}")

    if isinstance(data.get("messages"), list):
        raw_msgs = [(_first(data, _CHAT_NAME_KEYS), m) for m in data["messages"]]
    elif isinstance(data.get("chats"), dict) and isinstance(data["chats"].get("list"), list):
        raw_msgs = [(_first(chat, _CHAT_NAME_KEYS), m)
                    for chat in data["chats"]["list"] if isinstance(chat, dict)
                    for m in chat.get("messages") or []]
    else:
        raise ValueError(f"{source or 'input'}: unrecognized chat export format")

    out: List[Message] = []
    for pos, (chat, raw) in enumerate(raw_msgs):
        if not isinstance(raw, dict):
            continue
        msg = _message_from_raw(raw, pos, source, chat)
        if msg.text.strip():
            out.append(msg)
    return out


def _read_txt(path: str) -> List[Message]:
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        lines = [ln.rstrip("\r\n") for ln in f]
    return [
        Message(id=i, date="", text=ln, author="", source=path)
        for i, ln in enumerate(lines)
        if ln.strip()
    ]


def load_messages(paths: Iterable[str], verbose: Optional[bool] = None) -> List[Message]:
    """
    Read messages from .json chat exports and .txt files (one message per line).
    Order follows `paths`, then file order.
    """
    verbose = VERBOSE if verbose is None else verbose
    messages: List[Message] = []
    for path in paths:
        ext = os.path.splitext(path)[1].lower()
        if ext == ".json":
            with open(path, "r", encoding="utf-8") as f:
                batch = parse_chat(json.load(f), source=path)
        elif ext == ".txt":
            batch = _read_txt(path)
        else:
            raise ValueError(f"Unsupported input file (expected .json or .txt): {path}")
        messages.extend(batch)
        if verbose:
            log.info("Loaded %d messages from %s", len(batch), path)
    return messages
