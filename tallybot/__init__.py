"""Discord bot tallying the numbers posted in daily threads."""

__version__ = "1.0.0"
__status__ = "production"
