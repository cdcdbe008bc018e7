from __future__ import annotations

from dataclasses import dataclass
import os

from utils.time_utils import DEFAULT_TIMEZONE_NAME, resolve_timezone


TRUTHY_VALUES = {"1", "true", "yes", "on"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY_VALUES


def env_int(name: str, *, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    text = raw.strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"Invalid integer env {name}={raw!r}") from exc


@dataclass(frozen=True)
class BotConfig:
    discord_token: str
    timezone_name: str
    schedule_file: str
    bosses_file: str
    consume_on_missing_channel: bool
    trigger_misfire_grace_seconds: int
    enable_message_content_intent: bool
    log_level: str
    discord_log_level: str

    def validate(self) -> None:
        try:
            resolve_timezone(self.timezone_name)
        except ValueError as exc:
            raise ValueError(f"TIMEZONE is not a known IANA timezone: {self.timezone_name!r}") from exc
        if not self.schedule_file.strip():
            raise ValueError("SCHEDULE_FILE must not be empty")
        if not self.bosses_file.strip():
            raise ValueError("BOSSES_FILE must not be empty")
        if self.trigger_misfire_grace_seconds < 1:
            raise ValueError("TRIGGER_MISFIRE_GRACE_SECONDS must be >= 1")
        valid = ", ".join(sorted(VALID_LOG_LEVELS))
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of: {valid}")
        if self.discord_log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"DISCORD_LOG_LEVEL must be one of: {valid}")


def load_config() -> BotConfig:
    cfg = BotConfig(
        discord_token=os.getenv("DISCORD_TOKEN", ""),
        timezone_name=(os.getenv("TIMEZONE") or DEFAULT_TIMEZONE_NAME).strip(),
        schedule_file=os.getenv("SCHEDULE_FILE", "schedules.json"),
        bosses_file=os.getenv("BOSSES_FILE", "bosses.json"),
        consume_on_missing_channel=env_bool("CONSUME_SCHEDULE_ON_MISSING_CHANNEL", default=False),
        trigger_misfire_grace_seconds=env_int("TRIGGER_MISFIRE_GRACE_SECONDS", default=60),
        enable_message_content_intent=env_bool("ENABLE_MESSAGE_CONTENT_INTENT", default=True),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        discord_log_level=os.getenv("DISCORD_LOG_LEVEL", "INFO").strip().upper(),
    )
    cfg.validate()
    return cfg
