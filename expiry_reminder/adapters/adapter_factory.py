"""Adapter factory — creates the adapters selected by config."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from expiry_reminder.config import Settings
    from expiry_reminder.data.db import NotificationLogDB
    from expiry_reminder.ports.directory_port import DirectoryPort
    from expiry_reminder.ports.notification_port import ChatPort, EmailPort


def create_directory(settings: Settings) -> DirectoryPort:
    """Return the directory adapter matching DIRECTORY_PROVIDER."""
    provider = settings.DIRECTORY_PROVIDER.lower()

    if provider == "sqlite":
        from expiry_reminder.adapters.sqlite_directory import SQLiteDirectory

        return SQLiteDirectory(settings.DATABASE_PATH)

    if provider == "supabase":
        from expiry_reminder.adapters.supabase_directory import SupabaseDirectory

        return SupabaseDirectory(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown DIRECTORY_PROVIDER: {provider!r}")


def create_email_sender(settings: Settings) -> EmailPort | None:
    """Return a Resend sender, or None when no API key is configured."""
    if not settings.RESEND_API_KEY:
        return None

    from expiry_reminder.adapters.resend_email import ResendEmailSender

    return ResendEmailSender(
        api_key=settings.RESEND_API_KEY,
        sender=settings.EMAIL_FROM,
        api_url=settings.RESEND_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def create_chat_sender(settings: Settings) -> ChatPort:
    from expiry_reminder.adapters.pushplus_chat import PushPlusChatSender

    return PushPlusChatSender(
        api_url=settings.PUSHPLUS_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def create_ledger(settings: Settings) -> NotificationLogDB:
    """The dispatch ledger always lives in the local database."""
    from expiry_reminder.data.db import NotificationLogDB

    return NotificationLogDB(settings.DATABASE_PATH)
