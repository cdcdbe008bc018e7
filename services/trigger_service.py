from __future__ import annotations

import logging
from datetime import datetime
from typing import Awaitable, Callable, Iterable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from db.models import ScheduleRecord
from utils.time_utils import parse_hhmm, resolve_timezone


log = logging.getLogger("bossalert.triggers")

FireCallback = Callable[[str], Awaitable[None]]
JOB_ID_PREFIX = "schedule:"


def job_id_for(schedule_id: str) -> str:
    return f"{JOB_ID_PREFIX}{schedule_id}"


def daily_trigger(time_text: str, timezone_name: str) -> CronTrigger | None:
    parsed = parse_hhmm(time_text)
    if parsed is None:
        return None
    return CronTrigger(hour=parsed.hour, minute=parsed.minute, second=0, timezone=timezone_name)


class TriggerScheduler:
    """Owns the set of armed daily triggers, one per stored schedule record."""

    def __init__(
        self,
        *,
        timezone_name: str,
        on_fire: FireCallback,
        misfire_grace_seconds: int = 60,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        resolve_timezone(timezone_name)
        self.timezone_name = timezone_name
        self.on_fire = on_fire
        self.misfire_grace_seconds = max(1, int(misfire_grace_seconds))
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone_name)
        self._armed: dict[str, ScheduleRecord] = {}
        self._active = False

    @property
    def running(self) -> bool:
        return self._active

    def start(self) -> None:
        if not self._active:
            self._scheduler.start()
            self._active = True
            log.info("Trigger scheduler started (timezone=%s)", self.timezone_name)

    def shutdown(self) -> None:
        self.disarm_all()
        if self._active:
            # APScheduler 3.11 defers the actual stop to the event loop.
            self._scheduler.shutdown(wait=False)
            self._active = False
            log.info("Trigger scheduler shutdown requested")

    def arm(self, record: ScheduleRecord) -> bool:
        trigger = daily_trigger(record.time, self.timezone_name)
        if trigger is None:
            log.warning("Skipping schedule %s with unparsable time %r", record.id, record.time)
            return False

        job_id = job_id_for(record.id)
        self._scheduler.add_job(
            self._fire,
            trigger,
            args=[record.id],
            id=job_id,
            name=f"alert {record.id}",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=self.misfire_grace_seconds,
        )
        self._armed[record.id] = record
        log.info("Armed %s -> channel %s role %s (id=%s)", record.time, record.channel_id, record.role_id, record.id)
        return True

    def disarm(self, schedule_id: str) -> bool:
        if self._armed.pop(schedule_id, None) is None:
            return False
        job_id = job_id_for(schedule_id)
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            log.debug("Trigger %s was already gone", job_id)
        return True

    def disarm_all(self) -> int:
        count = 0
        for schedule_id in list(self._armed):
            if self.disarm(schedule_id):
                count += 1
        return count

    def rebuild(self, records: Iterable[ScheduleRecord]) -> int:
        self.disarm_all()
        armed = sum(1 for record in records if self.arm(record))
        log.info("Trigger set rebuilt with %s armed trigger(s)", armed)
        return armed

    def armed_ids(self) -> list[str]:
        return sorted(self._armed)

    def is_armed(self, schedule_id: str) -> bool:
        return schedule_id in self._armed

    def armed_record(self, schedule_id: str) -> ScheduleRecord | None:
        return self._armed.get(schedule_id)

    def next_fire_time(self, schedule_id: str, *, now: datetime | None = None) -> datetime | None:
        if schedule_id not in self._armed:
            return None
        job = self._scheduler.get_job(job_id_for(schedule_id))
        if job is None:
            return None
        current = now or datetime.now(resolve_timezone(self.timezone_name))
        return job.trigger.get_next_fire_time(None, current)

    async def _fire(self, schedule_id: str) -> None:
        log.info("Trigger fired for schedule %s", schedule_id)
        try:
            await self.on_fire(schedule_id)
        except Exception:
            log.exception("Unhandled error while firing schedule %s", schedule_id)
