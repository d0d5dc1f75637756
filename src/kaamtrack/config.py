"""Configuration management for KaamTrack."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

DEFAULT_TIMEZONE = "Asia/Kolkata"


class WindowMode(str, Enum):
    """How a daily QR code's validity window is anchored."""

    FIXED_DAILY = "fixed"  # window_start..+duration on the code's date
    ROLLING = "rolling"  # generation instant..+duration


@dataclass(frozen=True)
class QRWindowPolicy:
    """
    Validity window for daily check-in codes.

    Attributes:
        mode: FIXED_DAILY opens the window at `window_start` local time on
            the day of generation; ROLLING opens it at generation time.
        window_start: Local opening time for FIXED_DAILY. Default 07:00.
        duration_minutes: Window length. Default 240 (07:00-11:00).
        timezone: IANA zone that decides what "today" is.
    """

    mode: WindowMode = WindowMode.FIXED_DAILY
    window_start: time = time(7, 0)
    duration_minutes: int = 240
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.duration_minutes < 1:
            raise ValueError("duration_minutes must be at least 1")
        if self.duration_minutes > 24 * 60:
            raise ValueError("duration_minutes cannot exceed 1440 (one day)")
        ZoneInfo(self.timezone)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)

    def window_for(self, now: datetime) -> tuple[datetime, datetime]:
        """Return (valid_from, valid_until) for a code generated at `now`."""
        if self.mode == WindowMode.ROLLING:
            valid_from = now
        else:
            local_day = now.astimezone(self.tz).date()
            valid_from = datetime.combine(local_day, self.window_start, tzinfo=self.tz)
        return valid_from, valid_from + self.duration


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    host: str
    port: int
    debug: bool
    log_level: str
    default_daily_rate: Decimal
    qr_window: QRWindowPolicy

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./kaamtrack.db",
            ),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            default_daily_rate=Decimal(os.getenv("DEFAULT_DAILY_RATE", "500")),
            qr_window=QRWindowPolicy(
                mode=WindowMode(os.getenv("QR_WINDOW_MODE", "fixed").lower()),
                window_start=time.fromisoformat(os.getenv("QR_WINDOW_START", "07:00")),
                duration_minutes=int(os.getenv("QR_WINDOW_MINUTES", "240")),
                timezone=os.getenv("TIMEZONE", DEFAULT_TIMEZONE),
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
