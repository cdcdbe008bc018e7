from __future__ import annotations

from dataclasses import dataclass

from db.models import BossEntry, ScheduleRecord
from utils.text import (
    channel_mention,
    digits_only,
    is_channel_token,
    is_role_token,
    is_snowflake,
    role_mention,
    split_tokens,
)
from utils.time_utils import parse_hhmm


CREATE_PREFIX = "!agenda "
LIST_COMMANDS = frozenset({"!lista", "!listaschedules"})
REMOVE_PREFIXES = ("!remover ", "!removeschedule ")
CLEAR_COMMAND = "!limpar"
RUN_PREFIX = "!run "
DEBUG_COMMANDS = frozenset({"!debug", "!debugschedules"})

KIND_CREATE = "create"
KIND_LIST = "list"
KIND_REMOVE = "remove"
KIND_CLEAR = "clear"
KIND_RUN = "run"
KIND_DEBUG = "debug"

CREATE_USAGE = "Uso: `!agenda HH:MM #canal @role nome_do_boss [mensagem opcional]`"
BOSS_TEMPLATE = "A preparação para o boss **{title}** vai terminar em 10 minutos!"
FALLBACK_TEMPLATE = "Mensagem agendada ({boss_key})"
LIST_BATCH_SIZE = 10


class CommandUsageError(ValueError):
    """Malformed admin input; ``reply`` is sent back unchanged."""

    def __init__(self, reply: str) -> None:
        super().__init__(reply)
        self.reply = reply


@dataclass(slots=True)
class ParsedCommand:
    kind: str
    argument: str | None = None


@dataclass(slots=True)
class CreateRequest:
    time: str
    channel_id: str
    role_id: str
    boss_key: str
    extra_text: str


@dataclass(slots=True)
class RenderedAlert:
    boss: str
    message: str
    image: str | None


def _first_argument(text: str) -> str | None:
    parts = text.split()
    return parts[1] if len(parts) > 1 else None


def parse_command(content: str | None) -> ParsedCommand | None:
    text = (content or "").strip()
    if text.startswith(CREATE_PREFIX):
        return ParsedCommand(KIND_CREATE)
    if text in LIST_COMMANDS:
        return ParsedCommand(KIND_LIST)
    for prefix in REMOVE_PREFIXES:
        if text == prefix.strip() or text.startswith(prefix):
            return ParsedCommand(KIND_REMOVE, _first_argument(text))
    if text == CLEAR_COMMAND:
        return ParsedCommand(KIND_CLEAR)
    if text == RUN_PREFIX.strip() or text.startswith(RUN_PREFIX):
        return ParsedCommand(KIND_RUN, _first_argument(text))
    if text in DEBUG_COMMANDS:
        return ParsedCommand(KIND_DEBUG)
    return None


def find_boss_token_index(parts: list[str], *, channel_id: str | None, role_id: str | None) -> int | None:
    # Token order matters: the first token that is not a mention or a known id wins.
    for index in range(2, len(parts)):
        token = parts[index]
        if is_channel_token(token) or is_role_token(token):
            continue
        if is_snowflake(token) and token in (channel_id, role_id):
            continue
        return index
    return None


def parse_create_request(
    content: str,
    *,
    channel_mention_id: str | None = None,
    role_mention_id: str | None = None,
) -> CreateRequest:
    parts = split_tokens(content)
    time_token = parts[1] if len(parts) > 1 else ""
    if parse_hhmm(time_token) is None:
        raise CommandUsageError(f"{CREATE_USAGE} (hora inválida)")

    channel_id = channel_mention_id or digits_only(parts[2] if len(parts) > 2 else None)
    role_id = role_mention_id or digits_only(parts[3] if len(parts) > 3 else None)

    boss_index = find_boss_token_index(parts, channel_id=channel_id, role_id=role_id)
    if boss_index is None:
        raise CommandUsageError(f"Não consegui encontrar o nome do boss. {CREATE_USAGE}")

    if not channel_id or not role_id:
        raise CommandUsageError("Canal ou Role inválidos. Marque um canal e uma role ou use ids válidos.")

    return CreateRequest(
        time=time_token,
        channel_id=channel_id,
        role_id=role_id,
        boss_key=parts[boss_index],
        extra_text=" ".join(parts[boss_index + 1:]),
    )


def render_alert(*, boss_key: str, extra_text: str, entry: BossEntry | None) -> RenderedAlert:
    if entry is None:
        return RenderedAlert(
            boss=boss_key,
            message=extra_text or FALLBACK_TEMPLATE.format(boss_key=boss_key),
            image=None,
        )

    title = entry.display_name
    prefix = f"{extra_text}\n" if extra_text else ""
    return RenderedAlert(
        boss=title,
        message=prefix + BOSS_TEMPLATE.format(title=title),
        image=entry.imagem,
    )


def format_schedule_line(record: ScheduleRecord) -> str:
    boss_text = f"Boss: {record.boss}" if record.boss else "Boss: (não informado)"
    message_text = f"Mensagem: {record.message}" if record.message else "Mensagem: (vazia)"
    return (
        f"ID:{record.id} - {record.time} - {boss_text} - {message_text} - "
        f"Canal: {channel_mention(record.channel_id)} - Role: {role_mention(record.role_id)}"
    )


def created_reply(record: ScheduleRecord) -> str:
    return (
        f"Agenda criada: {record.time} -> {channel_mention(record.channel_id)} "
        f"{role_mention(record.role_id)} (id: {record.id})"
    )
