"""Slash commands: /total, /user_total, /range_total, /add_number."""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from tallybot.services.dates import InvalidDayKey
from tallybot.services.ingestor import MessageIngestor, RECORDED_TEMPLATE
from tallybot.services.queries import QueryResponder, USAGE_HINT
from tallybot.utils import format_total, format_value, is_thread_channel

logger = logging.getLogger(__name__)


class TallyCommands(commands.Cog):
    """Totals on demand. Registration with Discord happens outside the bot."""

    def __init__(self, bot: commands.Bot, responder: QueryResponder, ingestor: MessageIngestor):
        self.bot = bot
        self.responder = responder
        self.ingestor = ingestor

    async def _answer(self, interaction: discord.Interaction, build) -> None:
        try:
            text = build()
        except InvalidDayKey as e:
            logger.debug(f"[CMD] /{interaction.command.name} by {interaction.user.id}: {e}")
            await interaction.response.send_message(USAGE_HINT, ephemeral=True)
            return
        logger.info(f"[CMD] /{interaction.command.name} by {interaction.user.id}: {text}")
        await interaction.response.send_message(text)

    @app_commands.command(name="total", description="Total of all threads opened on a day")
    @app_commands.describe(date="YYYY-MM-DD, today if omitted")
    async def total(self, interaction: discord.Interaction, date: Optional[str] = None):
        await self._answer(interaction, lambda: self.responder.total(date))

    @app_commands.command(name="user_total", description="One user's total on a day or over a date range")
    @app_commands.describe(
        user="User to sum up",
        start="First day, YYYY-MM-DD",
        end="Last day, YYYY-MM-DD (same as start if omitted)",
    )
    async def user_total(
        self,
        interaction: discord.Interaction,
        user: discord.User,
        start: str,
        end: Optional[str] = None,
    ):
        await self._answer(
            interaction,
            lambda: self.responder.user_total(user.id, user.display_name, start, end),
        )

    @app_commands.command(name="range_total", description="Total of all users on a day or over a date range")
    @app_commands.describe(
        start="First day, YYYY-MM-DD",
        end="Last day, YYYY-MM-DD (same as start if omitted)",
    )
    async def range_total(self, interaction: discord.Interaction, start: str, end: Optional[str] = None):
        await self._answer(interaction, lambda: self.responder.range_total(start, end))

    @app_commands.command(name="add_number", description="Add a number to this thread's total")
    @app_commands.describe(number="The number to add")
    async def add_number(self, interaction: discord.Interaction, number: float):
        channel = interaction.channel
        if not is_thread_channel(channel):
            await interaction.response.send_message(
                "Use this command inside a daily thread.", ephemeral=True
            )
            return
        day, total = self.ingestor.record_manual(channel, interaction.id, interaction.user.id, float(number))
        await interaction.response.send_message(
            RECORDED_TEMPLATE.format(value=format_value(float(number)), day=day, total=format_total(total))
        )
