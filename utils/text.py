from __future__ import annotations

import re
from typing import Iterable


_CHANNEL_MENTION_PATTERN = re.compile(r"^<#[0-9]+>$")
_ROLE_MENTION_PATTERN = re.compile(r"^<@&[0-9]+>$")
_SNOWFLAKE_PATTERN = re.compile(r"^[0-9]{17,19}$")
_NON_DIGITS = re.compile(r"[^0-9]")


def split_tokens(content: str) -> list[str]:
    return (content or "").split()


def digits_only(token: str | None) -> str | None:
    if not token:
        return None
    value = _NON_DIGITS.sub("", token)
    return value or None


def is_channel_token(token: str) -> bool:
    return bool(_CHANNEL_MENTION_PATTERN.match(token)) or token.startswith("#")


def is_role_token(token: str) -> bool:
    return bool(_ROLE_MENTION_PATTERN.match(token)) or token.startswith("@")


def is_snowflake(token: str) -> bool:
    return bool(_SNOWFLAKE_PATTERN.match(token))


def channel_mention(channel_id: str | None) -> str:
    return f"<#{channel_id}>" if channel_id else ""


def role_mention(role_id: str | None) -> str:
    return f"<@&{role_id}>" if role_id else ""


def chunk_lines(lines: Iterable[str], *, size: int = 10) -> list[str]:
    if size < 1:
        raise ValueError("size must be >= 1")
    items = list(lines)
    return ["\n".join(items[start:start + size]) for start in range(0, len(items), size)]
