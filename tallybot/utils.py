"""Utility functions for the bot."""

import logging
from datetime import datetime, timezone

import discord

logger = logging.getLogger(__name__)

THREAD_TYPES = (
    discord.ChannelType.public_thread,
    discord.ChannelType.private_thread,
    discord.ChannelType.news_thread,
)


def utc_now() -> datetime:
    """
    Get current UTC time.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def is_thread_channel(channel) -> bool:
    """True for thread channels, including partial channels from raw events."""
    return getattr(channel, "type", None) in THREAD_TYPES


def format_value(value: float) -> str:
    """Render a recorded number the way the user typed it: 3, 4.5, -1."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_total(total: float) -> str:
    return f"{total:.1f}"


async def safe_reply(message, text: str) -> bool:
    """
    Reply to a message, logging instead of raising on Discord errors.

    Args:
        message: message to reply to
        text: reply text

    Returns:
        True if the reply was sent
    """
    try:
        await message.reply(text, mention_author=False)
        return True
    except discord.HTTPException as e:
        logger.error(f"[SAFE_REPLY] Reply to message {message.id} failed: {e}")
        return False


async def safe_send(channel, text: str) -> bool:
    """Send into a channel or thread, logging Discord errors."""
    try:
        await channel.send(text)
        return True
    except discord.HTTPException as e:
        logger.error(f"[SAFE_SEND] Send to channel {channel.id} failed: {e}")
        return False


async def fetch_parent_channel(bot, channel_id: int):
    """Resolve a channel from the cache, falling back to the API."""
    channel = bot.get_channel(channel_id)
    if channel is None:
        channel = await bot.fetch_channel(channel_id)
    return channel


async def fetch_active_threads(parent) -> list:
    """Active threads whose parent is ``parent``, newest first."""
    threads = await parent.guild.active_threads()
    children = [thread for thread in threads if thread.parent_id == parent.id]
    children.sort(key=lambda thread: thread.id, reverse=True)
    return children
