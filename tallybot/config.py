import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass
class Settings:
    """Bot configuration read from environment variables."""

    # Discord
    discord_token: str = os.getenv("DISCORD_TOKEN", "")
    parent_channel_id: int | None = _int_env("PARENT_CHANNEL_ID")

    # Timezone (day keys and the daily report are computed in this zone)
    timezone: str = os.getenv("TIMEZONE", "Asia/Shanghai")

    # Daily report, posted into every active thread
    report_hour: int = _int_env("REPORT_HOUR", 16)
    report_minute: int = _int_env("REPORT_MINUTE", 0)

    # Backfill: Discord returns at most 100 messages per history request
    backfill_page_size: int = _int_env("BACKFILL_PAGE_SIZE", 100)

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir: str = os.getenv("LOG_DIR", "logs")

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if not 0 <= self.report_hour <= 23:
            raise ValueError(f"REPORT_HOUR must be within 0..23, got {self.report_hour}")
        if not 0 <= self.report_minute <= 59:
            raise ValueError(f"REPORT_MINUTE must be within 0..59, got {self.report_minute}")
        if not 1 <= self.backfill_page_size <= 100:
            raise ValueError(
                f"BACKFILL_PAGE_SIZE must be within 1..100, got {self.backfill_page_size}"
            )


settings = Settings()
