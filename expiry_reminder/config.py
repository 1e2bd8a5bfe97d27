"""
Expiry Reminder — Centralized configuration.

Loads all settings from .env and validates them once at startup.
The resulting `settings` object is passed explicitly into the check run
and the HTTP app; nothing below the entry points reads the environment.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from expiry_reminder/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_DEFAULT_NOTIFY_DAYS = (30, 7, 1)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Email — Resend (empty key → email pass is skipped)
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "U盾提醒助手 <onboarding@resend.dev>"

    # Chat — PushPlus (WeChat push)
    PUSHPLUS_API_URL: str = "http://www.pushplus.plus/send"

    # Directory provider: "sqlite" | "supabase"
    DIRECTORY_PROVIDER: str = "sqlite"
    DATABASE_PATH: str = "data/assets.db"

    # Supabase (only needed when DIRECTORY_PROVIDER=supabase)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Schedule
    TIMEZONE: str = "Asia/Shanghai"
    CHECK_TIME: str = "09:00"

    # Notification policy
    EMAIL_SEND_INTERVAL_SECONDS: float = 1.0
    DEFAULT_NOTIFY_DAYS: tuple[int, ...] = _DEFAULT_NOTIFY_DAYS
    MESSAGE_LOCALE: str = "zh"
    DEDUPE_SAME_DAY: bool = False

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # HTTP endpoint
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @field_validator("DEFAULT_NOTIFY_DAYS", mode="before")
    @classmethod
    def parse_notify_days(cls, v: str | list[int] | tuple[int, ...]) -> tuple[int, ...]:
        if isinstance(v, (list, tuple)):
            days = [int(d) for d in v]
        elif isinstance(v, str) and v.strip():
            days = [int(d.strip()) for d in v.split(",") if d.strip()]
        else:
            days = []
        days = [d for d in days if d >= 0]
        return tuple(sorted(set(days), reverse=True)) or _DEFAULT_NOTIFY_DAYS

    @field_validator("DEDUPE_SAME_DAY", mode="before")
    @classmethod
    def parse_bool(cls, v: str | bool) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in ("1", "true", "yes", "on")

    @field_validator("MESSAGE_LOCALE", mode="before")
    @classmethod
    def parse_locale(cls, v: str) -> str:
        locale = (v or "zh").strip().lower()
        if locale not in ("zh", "en"):
            raise ValueError(f"Unsupported MESSAGE_LOCALE: {v!r}")
        return locale

    @field_validator("CHECK_TIME")
    @classmethod
    def validate_check_time(cls, v: str) -> str:
        hour, _, minute = v.partition(":")
        if not (hour.isdigit() and minute.isdigit()):
            raise ValueError(f"CHECK_TIME must be HH:MM, got {v!r}")
        if not (0 <= int(hour) <= 23 and 0 <= int(minute) <= 59):
            raise ValueError(f"CHECK_TIME out of range: {v!r}")
        return f"{int(hour):02d}:{int(minute):02d}"


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        RESEND_API_KEY=os.getenv("RESEND_API_KEY", ""),
        RESEND_API_URL=os.getenv("RESEND_API_URL", "https://api.resend.com/emails"),
        EMAIL_FROM=os.getenv("EMAIL_FROM", "U盾提醒助手 <onboarding@resend.dev>"),
        PUSHPLUS_API_URL=os.getenv("PUSHPLUS_API_URL", "http://www.pushplus.plus/send"),
        DIRECTORY_PROVIDER=os.getenv("DIRECTORY_PROVIDER", "sqlite"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/assets.db"),
        SUPABASE_URL=os.getenv("SUPABASE_URL", ""),
        SUPABASE_SERVICE_ROLE_KEY=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
        TIMEZONE=os.getenv("TIMEZONE", "Asia/Shanghai"),
        CHECK_TIME=os.getenv("CHECK_TIME", "09:00"),
        EMAIL_SEND_INTERVAL_SECONDS=os.getenv("EMAIL_SEND_INTERVAL_SECONDS", "1.0"),
        DEFAULT_NOTIFY_DAYS=os.getenv("DEFAULT_NOTIFY_DAYS", "30,7,1"),
        MESSAGE_LOCALE=os.getenv("MESSAGE_LOCALE", "zh"),
        DEDUPE_SAME_DAY=os.getenv("DEDUPE_SAME_DAY", "false"),
        HTTP_TIMEOUT_SECONDS=os.getenv("HTTP_TIMEOUT_SECONDS", "10"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=os.getenv("PORT", "8000"),
    )


# Singleton — built once at import and handed to entry points as:
#   from expiry_reminder.config import settings
settings = _load_settings()
