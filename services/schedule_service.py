from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from db.catalog import BossCatalog
from db.models import ScheduleRecord
from db.schedule_store import ScheduleStore
from services.command_service import CreateRequest, render_alert
from services.trigger_service import TriggerScheduler
from utils.time_utils import now_millis


log = logging.getLogger("bossalert.schedules")


@dataclass(slots=True)
class MutationResult:
    changed: int
    persisted: bool


@dataclass(slots=True)
class CreateResult:
    record: ScheduleRecord
    persisted: bool


def new_schedule_id(existing_ids: set[str], millis: int) -> str:
    candidate = int(millis)
    while str(candidate) in existing_ids:
        candidate += 1
    return str(candidate)


class ScheduleService:
    """Serializes every load-modify-save on the store and keeps the trigger set in step with it."""

    def __init__(
        self,
        *,
        store: ScheduleStore,
        catalog: BossCatalog,
        triggers: TriggerScheduler,
        clock_millis: Callable[[], int] = now_millis,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.triggers = triggers
        self._clock_millis = clock_millis
        self._lock = asyncio.Lock()

    def list_all(self) -> list[ScheduleRecord]:
        return self.store.load_all()

    def get(self, schedule_id: str) -> ScheduleRecord | None:
        for record in self.store.load_all():
            if record.id == schedule_id:
                return record
        return None

    async def arm_all(self) -> int:
        async with self._lock:
            return self.triggers.rebuild(self.store.load_all())

    async def create(self, request: CreateRequest) -> CreateResult:
        rendered = render_alert(
            boss_key=request.boss_key,
            extra_text=request.extra_text,
            entry=self.catalog.find_boss(request.boss_key),
        )
        async with self._lock:
            records = self.store.load_all()
            record = ScheduleRecord(
                id=new_schedule_id({row.id for row in records}, self._clock_millis()),
                time=request.time,
                channel_id=request.channel_id,
                role_id=request.role_id,
                boss=rendered.boss,
                message=rendered.message,
                image=rendered.image,
            )
            records.append(record)
            persisted = self.store.save_all(records)
            self.triggers.rebuild(records)
        log.info("Created schedule %s at %s (boss=%s)", record.id, record.time, record.boss)
        return CreateResult(record=record, persisted=persisted)

    async def remove(self, schedule_id: str) -> MutationResult:
        async with self._lock:
            records = self.store.load_all()
            remaining = [row for row in records if row.id != schedule_id]
            if len(remaining) == len(records):
                return MutationResult(changed=0, persisted=True)
            persisted = self.store.save_all(remaining)
            self.triggers.rebuild(remaining)
        log.info("Removed schedule %s", schedule_id)
        return MutationResult(changed=len(records) - len(remaining), persisted=persisted)

    async def remove_fired(self, schedule_id: str) -> MutationResult:
        async with self._lock:
            records = self.store.load_all()
            remaining = [row for row in records if row.id != schedule_id]
            persisted = True
            if len(remaining) != len(records):
                persisted = self.store.save_all(remaining)
            self.triggers.disarm(schedule_id)
        log.info("Schedule %s removed after firing", schedule_id)
        return MutationResult(changed=len(records) - len(remaining), persisted=persisted)

    async def clear(self) -> MutationResult:
        async with self._lock:
            records = self.store.load_all()
            if not records:
                self.triggers.disarm_all()
                return MutationResult(changed=0, persisted=True)
            persisted = self.store.save_all([])
            self.triggers.disarm_all()
        log.info("All %s schedules cleared manually", len(records))
        return MutationResult(changed=len(records), persisted=persisted)
