from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from bot.config import BotConfig
from db.catalog import BossCatalog
from db.schedule_store import ScheduleStore
from services.alert_service import REASON_CHANNEL_NOT_FOUND, AlertService, Notifier
from services.command_service import (
    KIND_CLEAR,
    KIND_CREATE,
    KIND_DEBUG,
    KIND_LIST,
    KIND_REMOVE,
    KIND_RUN,
    LIST_BATCH_SIZE,
    CommandUsageError,
    ParsedCommand,
    created_reply,
    format_schedule_line,
    parse_command,
    parse_create_request,
)
from services.schedule_service import ScheduleService
from services.trigger_service import TriggerScheduler
from utils.text import chunk_lines
from utils.time_utils import now_millis


log = logging.getLogger("bossalert.commands")

PERSIST_WARNING = "⚠️ Não foi possível salvar o arquivo de agendas, veja logs."


@dataclass(slots=True)
class IncomingCommand:
    content: str
    author_is_bot: bool = False
    in_guild: bool = True
    author_can_manage: bool = True
    channel_mention_ids: list[str] = field(default_factory=list)
    role_mention_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CommandOutcome:
    replies: list[str] = field(default_factory=list)
    channel_posts: list[str] = field(default_factory=list)


class BotApplication:
    def __init__(
        self,
        *,
        config: BotConfig,
        notifier: Notifier,
        store: ScheduleStore | None = None,
        catalog: BossCatalog | None = None,
        scheduler: AsyncIOScheduler | None = None,
        clock_millis: Callable[[], int] = now_millis,
    ) -> None:
        self.config = config
        self.store = store or ScheduleStore(config.schedule_file)
        self.catalog = catalog or BossCatalog(config.bosses_file)
        self.triggers = TriggerScheduler(
            timezone_name=config.timezone_name,
            on_fire=self._on_trigger_fire,
            misfire_grace_seconds=config.trigger_misfire_grace_seconds,
            scheduler=scheduler,
        )
        self.schedules = ScheduleService(
            store=self.store,
            catalog=self.catalog,
            triggers=self.triggers,
            clock_millis=clock_millis,
        )
        self.alerts = AlertService(
            schedules=self.schedules,
            catalog=self.catalog,
            notifier=notifier,
            consume_on_missing_channel=config.consume_on_missing_channel,
        )
        self._started = False

    async def start(self) -> int:
        if not self._started:
            self.triggers.start()
            self._started = True
        return await self.schedules.arm_all()

    async def close(self) -> None:
        self.triggers.shutdown()
        self._started = False
        await asyncio.sleep(0)

    async def _on_trigger_fire(self, schedule_id: str) -> None:
        await self.alerts.fire(schedule_id)

    @staticmethod
    def is_authorized(incoming: IncomingCommand) -> bool:
        return not incoming.author_is_bot and incoming.in_guild and incoming.author_can_manage

    async def handle_message(self, incoming: IncomingCommand) -> CommandOutcome | None:
        if not self.is_authorized(incoming):
            return None
        command = parse_command(incoming.content)
        if command is None:
            return None

        if command.kind == KIND_CREATE:
            return await self._handle_create(incoming)
        if command.kind == KIND_LIST:
            return self._handle_list()
        if command.kind == KIND_REMOVE:
            return await self._handle_remove(command)
        if command.kind == KIND_CLEAR:
            return await self._handle_clear()
        if command.kind == KIND_RUN:
            return await self._handle_run(command)
        if command.kind == KIND_DEBUG:
            return self._handle_debug()
        return None

    async def _handle_create(self, incoming: IncomingCommand) -> CommandOutcome:
        try:
            request = parse_create_request(
                incoming.content.strip(),
                channel_mention_id=incoming.channel_mention_ids[0] if incoming.channel_mention_ids else None,
                role_mention_id=incoming.role_mention_ids[0] if incoming.role_mention_ids else None,
            )
        except CommandUsageError as exc:
            return CommandOutcome(replies=[exc.reply])

        result = await self.schedules.create(request)
        replies = [created_reply(result.record)]
        if not result.persisted:
            replies.append(PERSIST_WARNING)
        return CommandOutcome(replies=replies)

    def _handle_list(self) -> CommandOutcome:
        records = self.schedules.list_all()
        if not records:
            return CommandOutcome(replies=["Nenhuma agenda cadastrada."])
        lines = [format_schedule_line(record) for record in records]
        return CommandOutcome(channel_posts=chunk_lines(lines, size=LIST_BATCH_SIZE))

    async def _handle_remove(self, command: ParsedCommand) -> CommandOutcome:
        if not command.argument:
            return CommandOutcome(replies=["Coloque o ID: `!remover ID`"])
        result = await self.schedules.remove(command.argument)
        if not result.changed:
            return CommandOutcome(replies=["ID não encontrado."])
        replies = [f"Agenda removida: {command.argument}"]
        if not result.persisted:
            replies.append(PERSIST_WARNING)
        return CommandOutcome(replies=replies)

    async def _handle_clear(self) -> CommandOutcome:
        result = await self.schedules.clear()
        if not result.changed:
            return CommandOutcome(replies=["Nenhum alarme existente para apagar."])
        replies = [f"🧹 Todos os {result.changed} alarmes foram apagados com sucesso!"]
        if not result.persisted:
            replies.append(PERSIST_WARNING)
        return CommandOutcome(replies=replies)

    async def _handle_run(self, command: ParsedCommand) -> CommandOutcome:
        if not command.argument:
            return CommandOutcome(replies=["Uso: !run ID"])
        result = await self.alerts.run_now(command.argument)
        if result is None:
            return CommandOutcome(replies=["ID não encontrado"])
        if result.delivered:
            return CommandOutcome(replies=["Mensagem enviada."])
        if result.reason == REASON_CHANNEL_NOT_FOUND:
            return CommandOutcome(replies=["Canal não encontrado"])
        return CommandOutcome(replies=["Erro ao enviar, veja logs."])

    def _handle_debug(self) -> CommandOutcome:
        records = self.schedules.list_all()
        log.info("Schedules: %s", [record.to_dict() for record in records])
        return CommandOutcome(
            replies=[
                f"TIMEZONE={self.config.timezone_name}\n"
                f"Schedules carregados: {len(records)}\n"
                f"Triggers ativos: {len(self.triggers.armed_ids())}"
            ]
        )
