"""Thread message listeners: creation, edit, deletion."""

import logging

import discord
from discord.ext import commands

from tallybot.services.ingestor import MessageIngestor
from tallybot.utils import is_thread_channel

logger = logging.getLogger(__name__)


class MessageEvents(commands.Cog):
    """Feeds thread traffic into the ingestor. Messages outside threads are ignored."""

    def __init__(self, bot: commands.Bot, ingestor: MessageIngestor):
        self.bot = bot
        self.ingestor = ingestor

    def _tracked(self, channel) -> bool:
        # Raw events may carry a partial channel without a type; a thread we
        # already bucketed is still a thread
        if channel is None:
            return False
        return is_thread_channel(channel) or self.ingestor.store.day_for_thread(channel.id) is not None

    @commands.Cog.listener()
    async def on_thread_create(self, thread: discord.Thread):
        self.ingestor.on_thread_create(thread)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.guild is None or not self._tracked(message.channel):
            return
        await self.ingestor.on_message(message)

    @commands.Cog.listener()
    async def on_raw_message_edit(self, payload: discord.RawMessageUpdateEvent):
        # Raw event: edits of messages that fell out of the cache still count
        message = payload.message
        if "content" not in payload.data or not self._tracked(message.channel):
            return
        await self.ingestor.on_message_edit(message)

    @commands.Cog.listener()
    async def on_raw_message_delete(self, payload: discord.RawMessageDeleteEvent):
        self.ingestor.on_message_delete(payload.channel_id, payload.message_id)

    @commands.Cog.listener()
    async def on_raw_bulk_message_delete(self, payload: discord.RawBulkMessageDeleteEvent):
        for message_id in payload.message_ids:
            self.ingestor.on_message_delete(payload.channel_id, message_id)
