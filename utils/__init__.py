from utils.text import (
    channel_mention,
    chunk_lines,
    digits_only,
    is_channel_token,
    is_role_token,
    is_snowflake,
    role_mention,
    split_tokens,
)
from utils.time_utils import is_hhmm_shape, parse_hhmm, resolve_timezone

__all__ = [
    "channel_mention",
    "chunk_lines",
    "digits_only",
    "is_channel_token",
    "is_hhmm_shape",
    "is_role_token",
    "is_snowflake",
    "parse_hhmm",
    "resolve_timezone",
    "role_mention",
    "split_tokens",
]
