from __future__ import annotations

import json
import logging
from pathlib import Path

from db.models import BossEntry


log = logging.getLogger("bossalert.catalog")


class BossCatalog:
    """Read-only boss list. The file is read again on every lookup so edits apply without a restart."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> list[BossEntry]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.exception("Failed to read boss catalog %s", self.path.as_posix())
            return []
        if not isinstance(raw, list):
            log.error("Boss catalog %s does not contain a JSON array", self.path.as_posix())
            return []
        return [BossEntry.from_dict(row) for row in raw if isinstance(row, dict)]

    def find_boss(self, key: str | None, *, match_external_id: bool = True) -> BossEntry | None:
        needle = (key or "").strip().lower()
        if not needle:
            return None
        entries = self.load()

        for entry in entries:
            if entry.key == needle:
                return entry
        for entry in entries:
            if entry.titulo and entry.titulo.lower() == needle:
                return entry
        if not match_external_id:
            return None
        for entry in entries:
            if entry.id and entry.id.lower() == needle:
                return entry
        return None

    def image_for(self, boss: str | None) -> str | None:
        # Saved boss names are titles or keys, never external ids.
        entry = self.find_boss(boss, match_external_id=False)
        return entry.imagem if entry is not None else None
