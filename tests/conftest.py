from __future__ import annotations

import json
from pathlib import Path

import pytest

from bot.config import BotConfig
from bot.main import BotApplication
from db.catalog import BossCatalog
from db.schedule_store import ScheduleStore
from services.alert_service import REASON_CHANNEL_NOT_FOUND, REASON_SEND_FAILED, DeliveryResult


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: list[dict[str, object]] = []
        self.missing_channels: set[str] = set()
        self.failing_channels: set[str] = set()

    async def send_alert(self, *, channel_id: str, role_mention: str, message: str, image: str | None) -> DeliveryResult:
        if channel_id in self.missing_channels:
            return DeliveryResult(delivered=False, reason=REASON_CHANNEL_NOT_FOUND)
        if channel_id in self.failing_channels:
            return DeliveryResult(delivered=False, reason=REASON_SEND_FAILED)
        self.sent.append(
            {"channel_id": channel_id, "role_mention": role_mention, "message": message, "image": image}
        )
        return DeliveryResult(delivered=True)


class FixedClock:
    def __init__(self, start: int = 1760000000000) -> None:
        self.value = start

    def __call__(self) -> int:
        current = self.value
        self.value += 1000
        return current


@pytest.fixture
def schedule_path(tmp_path: Path) -> Path:
    return tmp_path / "schedules.json"


@pytest.fixture
def bosses_path(tmp_path: Path) -> Path:
    path = tmp_path / "bosses.json"
    path.write_text(
        json.dumps(
            [
                {"key": "dragon", "titulo": "Ancient Dragon", "imagem": "http://x/d.png"},
                {"nome": "Kraken", "title": "Deep Kraken", "image": "http://x/k.png", "id": "K-7"},
                {"name": "golem", "titulo": "Stone Golem"},
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config(schedule_path: Path, bosses_path: Path) -> BotConfig:
    return BotConfig(
        discord_token="token",
        timezone_name="America/Sao_Paulo",
        schedule_file=str(schedule_path),
        bosses_file=str(bosses_path),
        consume_on_missing_channel=False,
        trigger_misfire_grace_seconds=60,
        enable_message_content_intent=True,
        log_level="DEBUG",
        discord_log_level="INFO",
    )


@pytest.fixture
def store(schedule_path: Path) -> ScheduleStore:
    return ScheduleStore(schedule_path)


@pytest.fixture
def catalog(bosses_path: Path) -> BossCatalog:
    return BossCatalog(bosses_path)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def app(config: BotConfig, notifier: FakeNotifier, clock: FixedClock) -> BotApplication:
    return BotApplication(config=config, notifier=notifier, clock_millis=clock)
