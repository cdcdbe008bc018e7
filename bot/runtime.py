from __future__ import annotations

import logging
import os
from typing import Any

import discord
from dotenv import load_dotenv

from bot.config import BotConfig, load_config
from bot.logging_setup import setup_logging
from bot.main import BotApplication, CommandOutcome, IncomingCommand
from bot.notifier import DiscordNotifier
from bot.permissions import can_manage_schedules


log = logging.getLogger("bossalert.runtime")


def incoming_from_message(message: Any) -> IncomingCommand:
    return IncomingCommand(
        content=getattr(message, "content", "") or "",
        author_is_bot=bool(getattr(message.author, "bot", False)),
        in_guild=getattr(message, "guild", None) is not None,
        author_can_manage=can_manage_schedules(message.author),
        channel_mention_ids=[str(cid) for cid in (getattr(message, "raw_channel_mentions", None) or [])],
        role_mention_ids=[str(rid) for rid in (getattr(message, "raw_role_mentions", None) or [])],
    )


async def send_outcome(message: Any, outcome: CommandOutcome) -> None:
    # Listings and confirmations quote role mentions; they must not ping.
    quiet = discord.AllowedMentions.none()
    for reply in outcome.replies:
        try:
            await message.reply(reply, mention_author=False, allowed_mentions=quiet)
        except discord.HTTPException:
            log.exception("Failed to reply in channel %s", getattr(message.channel, "id", None))
    for post in outcome.channel_posts:
        try:
            await message.channel.send(post, allowed_mentions=quiet)
        except discord.HTTPException:
            log.exception("Failed to post in channel %s", getattr(message.channel, "id", None))


class AlertDiscordBot(discord.Client):
    def __init__(self, config: BotConfig) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_messages = True
        intents.message_content = config.enable_message_content_intent
        super().__init__(intents=intents)

        self.config = config
        self.app = BotApplication(config=config, notifier=DiscordNotifier(self))
        self._triggers_armed = False

    async def on_ready(self) -> None:
        log.info("Bot ready as %s", self.user)
        if not self._triggers_armed:
            armed = await self.app.start()
            self._triggers_armed = True
            log.info("Armed %s trigger(s) from %s", armed, self.config.schedule_file)

    async def on_message(self, message) -> None:
        try:
            if message.author.bot or message.guild is None:
                return
            outcome = await self.app.handle_message(incoming_from_message(message))
            if outcome is not None:
                await send_outcome(message, outcome)
        except Exception:
            log.exception("Error while handling message %s", getattr(message, "id", None))

    async def close(self) -> None:
        try:
            await self.app.close()
        except Exception:
            log.exception("Failed to stop trigger scheduler during shutdown.")
        await super().close()


def run() -> int:
    load_dotenv()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    try:
        config = load_config()
    except ValueError as exc:
        log.error("Config error: %s", exc)
        return 1

    setup_logging(config.log_level, discord_level=config.discord_log_level)
    if not config.discord_token:
        log.error("DISCORD_TOKEN missing")
        return 1

    bot = AlertDiscordBot(config)
    try:
        bot.run(config.discord_token, log_handler=None)
    except discord.LoginFailure:
        log.error("Discord login failed, check DISCORD_TOKEN")
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
