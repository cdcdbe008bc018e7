from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from db.models import ScheduleRecord


log = logging.getLogger("bossalert.store")


class ScheduleStore:
    """JSON file holding every schedule record; always read and written whole."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load_all(self) -> list[ScheduleRecord]:
        if not self.path.exists():
            self._initialize()
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.exception("Failed to read schedule file %s", self.path.as_posix())
            return []

        if not isinstance(raw, list):
            log.error("Schedule file %s does not contain a JSON array", self.path.as_posix())
            return []

        records: list[ScheduleRecord] = []
        for row in raw:
            if not isinstance(row, dict):
                log.warning("Skipping malformed schedule row: %r", row)
                continue
            try:
                records.append(ScheduleRecord.from_dict(row))
            except ValueError:
                log.warning("Skipping schedule row without id: %r", row)
        return records

    def save_all(self, records: Iterable[ScheduleRecord]) -> bool:
        payload = [record.to_dict() for record in records]
        temp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError:
            log.exception("Failed to write schedule file %s", self.path.as_posix())
            return False
        return True

    def _initialize(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")
        except OSError:
            log.exception("Failed to initialize schedule file %s", self.path.as_posix())
