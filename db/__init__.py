from db.catalog import BossCatalog
from db.models import BossEntry, ScheduleRecord
from db.schedule_store import ScheduleStore

__all__ = ["BossCatalog", "BossEntry", "ScheduleRecord", "ScheduleStore"]
