from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from db.catalog import BossCatalog
from db.models import ScheduleRecord
from services.schedule_service import ScheduleService
from utils.text import role_mention


log = logging.getLogger("bossalert.alerts")

REASON_CHANNEL_NOT_FOUND = "channel_not_found"
REASON_SEND_FAILED = "send_failed"


@dataclass(slots=True)
class DeliveryResult:
    delivered: bool
    reason: str | None = None


class Notifier(Protocol):
    async def send_alert(
        self,
        *,
        channel_id: str,
        role_mention: str,
        message: str,
        image: str | None,
    ) -> DeliveryResult: ...


class AlertService:
    def __init__(
        self,
        *,
        schedules: ScheduleService,
        catalog: BossCatalog,
        notifier: Notifier,
        consume_on_missing_channel: bool = False,
    ) -> None:
        self.schedules = schedules
        self.catalog = catalog
        self.notifier = notifier
        self.consume_on_missing_channel = consume_on_missing_channel

    def resolve_image(self, record: ScheduleRecord) -> str | None:
        if record.image:
            return record.image
        if not record.boss:
            return None
        # Catalog may have gained an image since the schedule was created.
        return self.catalog.image_for(record.boss)

    async def deliver(self, record: ScheduleRecord) -> DeliveryResult:
        image = self.resolve_image(record)
        log.info("Sending alert %s (%s) -> %s", record.id, record.time, record.message)
        try:
            return await self.notifier.send_alert(
                channel_id=record.channel_id,
                role_mention=role_mention(record.role_id),
                message=record.message,
                image=image,
            )
        except Exception:
            log.exception("Notifier failed for schedule %s", record.id)
            return DeliveryResult(delivered=False, reason=REASON_SEND_FAILED)

    async def fire(self, schedule_id: str) -> DeliveryResult | None:
        record = self.schedules.get(schedule_id)
        if record is None:
            # A failed save leaves the armed copy as the only one.
            record = self.schedules.triggers.armed_record(schedule_id)
            if record is not None:
                log.warning("Schedule %s missing from the store, firing from the armed copy", schedule_id)
        if record is None:
            log.warning("Trigger fired for unknown schedule %s, disarming", schedule_id)
            self.schedules.triggers.disarm(schedule_id)
            return None

        result = await self.deliver(record)
        if result.delivered:
            await self.schedules.remove_fired(schedule_id)
            return result

        if result.reason == REASON_CHANNEL_NOT_FOUND:
            log.warning("Channel %s not found for schedule %s", record.channel_id, schedule_id)
            if self.consume_on_missing_channel:
                await self.schedules.remove_fired(schedule_id)
        else:
            log.error("Delivery failed for schedule %s (%s), keeping it for the next run", schedule_id, result.reason)
        return result

    async def run_now(self, schedule_id: str) -> DeliveryResult | None:
        record = self.schedules.get(schedule_id)
        if record is None:
            return None
        return await self.deliver(record)
