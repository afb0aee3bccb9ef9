import asyncio
import logging

import discord
from discord.ext import commands

from tallybot.config import settings
from tallybot.handlers.commands import TallyCommands
from tallybot.handlers.messages import MessageEvents
from tallybot.jobs.scheduler import setup_scheduler, shutdown_scheduler
from tallybot.logger import setup_logging
from tallybot.services.backfill import BackfillScanner
from tallybot.services.ingestor import MessageIngestor
from tallybot.services.queries import QueryResponder
from tallybot.services.tally_store import TallyStore
from tallybot.utils import fetch_active_threads, fetch_parent_channel, format_total

logger = logging.getLogger(__name__)


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.guilds = True
    intents.guild_messages = True
    intents.message_content = True
    return intents


class TallyBot(commands.Bot):
    """Discord client wired to one TallyStore shared by every component."""

    def __init__(self, store: TallyStore | None = None):
        super().__init__(command_prefix=commands.when_mentioned, intents=build_intents())
        self.store = store or TallyStore()
        self.ingestor = MessageIngestor(self.store, settings.timezone)
        self.scanner = BackfillScanner(self.store, settings.timezone, settings.backfill_page_size)
        self.responder = QueryResponder(self.store, settings.timezone)
        self._started = False

    async def setup_hook(self) -> None:
        await self.add_cog(MessageEvents(self, self.ingestor))
        await self.add_cog(TallyCommands(self, self.responder, self.ingestor))

    async def on_ready(self):
        logger.info(f"Bot logged in: {self.user} (id: {self.user.id})")
        # on_ready fires again after every reconnect
        if self._started:
            return
        self._started = True
        await self.on_startup()

    async def on_startup(self) -> None:
        """Backfill active threads, then start the daily report."""
        if settings.parent_channel_id is None:
            logger.warning("PARENT_CHANNEL_ID is not set: no backfill, no daily report")
            return

        try:
            parent = await fetch_parent_channel(self, settings.parent_channel_id)
            threads = await fetch_active_threads(parent)
        except discord.DiscordException as e:
            logger.error(f"Failed to fetch threads of channel {settings.parent_channel_id}: {e}")
        else:
            logger.info(f"Backfilling {len(threads)} active thread(s) of #{parent}")
            await self.scanner.scan_threads(threads)
            for day in self.store.days():
                logger.info(
                    f"Day {day}: {len(self.store.threads(day))} thread(s), "
                    f"total {format_total(self.store.day_total(day))}"
                )
            me = parent.guild.me
            if me is not None:
                allowed = [name for name, value in parent.permissions_for(me) if value]
                logger.info(f"Bot permissions in parent channel: {', '.join(allowed)}")

        await setup_scheduler(self, self.store)

    async def close(self) -> None:
        shutdown_scheduler()
        await super().close()


async def main():
    logger.info("=" * 60)
    logger.info("TALLY BOT STARTING")
    logger.info("=" * 60)
    logger.info(f"Timezone: {settings.timezone}")
    logger.info(f"Parent channel: {settings.parent_channel_id}")
    logger.info(f"Log level: {settings.log_level}")

    if not settings.discord_token:
        logger.error("DISCORD_TOKEN is not set!")
        raise RuntimeError("DISCORD_TOKEN is not set")

    bot = TallyBot()
    try:
        async with bot:
            await bot.start(settings.discord_token)
    finally:
        logger.info("=" * 60)
        logger.info("TALLY BOT STOPPED")
        logger.info("=" * 60)


def run():
    setup_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")


if __name__ == "__main__":
    run()
