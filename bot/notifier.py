from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import discord

from services.alert_service import REASON_CHANNEL_NOT_FOUND, REASON_SEND_FAILED, DeliveryResult


log = logging.getLogger("bossalert.notifier")

ALERT_TITLE = "⚔️ Boss Spawn Imminente!"
ALERT_COLOR = 0x00AEFF


def build_alert_payload(*, role_mention: str, message: str, image: str | None) -> dict[str, Any]:
    allowed = discord.AllowedMentions(roles=True, users=False, everyone=False)
    if not image:
        return {"content": f"{role_mention} {message}", "allowed_mentions": allowed}

    embed = discord.Embed(
        title=ALERT_TITLE,
        description=message,
        color=ALERT_COLOR,
        timestamp=datetime.now(UTC),
    )
    embed.set_image(url=image)
    return {"content": role_mention or None, "embed": embed, "allowed_mentions": allowed}


class DiscordNotifier:
    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def resolve_channel(self, channel_id: str) -> Any | None:
        try:
            target_id = int(channel_id)
        except (TypeError, ValueError):
            return None
        channel = self.client.get_channel(target_id)
        if channel is not None and hasattr(channel, "send"):
            return channel
        try:
            fetched = await self.client.fetch_channel(target_id)
        except (discord.HTTPException, discord.InvalidData):
            log.debug("Could not fetch channel %s", channel_id, exc_info=True)
            return None
        return fetched if hasattr(fetched, "send") else None

    async def send_alert(
        self,
        *,
        channel_id: str,
        role_mention: str,
        message: str,
        image: str | None,
    ) -> DeliveryResult:
        channel = await self.resolve_channel(channel_id)
        if channel is None:
            return DeliveryResult(delivered=False, reason=REASON_CHANNEL_NOT_FOUND)

        payload = build_alert_payload(role_mention=role_mention, message=message, image=image)
        try:
            await channel.send(**payload)
        except discord.HTTPException:
            log.exception("Sending alert to channel %s failed", channel_id)
            return DeliveryResult(delivered=False, reason=REASON_SEND_FAILED)
        return DeliveryResult(delivered=True)
