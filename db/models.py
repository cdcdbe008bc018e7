from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


@dataclass(frozen=True, slots=True)
class ScheduleRecord:
    id: str
    time: str
    channel_id: str
    role_id: str
    boss: str | None
    message: str
    image: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ScheduleRecord:
        schedule_id = raw.get("id")
        if schedule_id is None or str(schedule_id) == "":
            raise ValueError("Schedule row without id")
        return cls(
            id=str(schedule_id),
            time=str(raw.get("time") or ""),
            channel_id=str(raw.get("channelId") or ""),
            role_id=str(raw.get("roleId") or ""),
            boss=_optional_text(raw.get("boss")),
            message=str(raw.get("message") or ""),
            image=_optional_text(raw.get("image")),
        )

    def to_dict(self) -> dict[str, str | None]:
        return {
            "id": self.id,
            "time": self.time,
            "channelId": self.channel_id,
            "roleId": self.role_id,
            "boss": self.boss,
            "message": self.message,
            "image": self.image,
        }


@dataclass(frozen=True, slots=True)
class BossEntry:
    key: str
    titulo: str | None
    imagem: str | None
    id: str | None = None

    @property
    def display_name(self) -> str:
        return self.titulo or self.key

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> BossEntry:
        key_source = raw.get("nome") or raw.get("name") or raw.get("id") or raw.get("key") or ""
        return cls(
            key=str(key_source).lower(),
            titulo=_optional_text(raw.get("titulo") or raw.get("title") or raw.get("nome") or raw.get("name")),
            imagem=_optional_text(raw.get("imagem") or raw.get("image") or raw.get("img") or raw.get("picture")),
            id=_optional_text(raw.get("id")),
        )
