"""Expiry rules — the notification decision engine.

For one asset, its owner's preferences and an evaluation date, decide
whether a notification fires today, how severe it is, and which messages
go out on which channels.

No I/O: this module only transforms data. Evaluating the same inputs
twice yields equal decisions; deduplicating repeated sends on the same
day is the dispatch ledger's job.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from expiry_reminder.core.messages import (
    ZH,
    MessageTemplates,
    build_chat_content,
    build_email_html,
    build_subject,
)
from expiry_reminder.data.models import (
    DEFAULT_NOTIFY_DAYS,
    Asset,
    Channel,
    NotificationDecision,
    NotificationEvent,
    OwnerPreferences,
    Severity,
)


def local_today(tz_name: str | None = None) -> date:
    """Today's date at midnight, in `tz_name` or the process's local zone."""
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).date()
    return date.today()


def days_until_expiry(expiry_date: date, today: date) -> int:
    """Whole calendar days from `today` to `expiry_date`.

    Both are calendar dates (already truncated to midnight), so the
    difference is exact: 0 on the expiry day, negative once past it.
    """
    return (expiry_date - today).days


def effective_notify_days(
    asset: Asset,
    owner: OwnerPreferences | None,
) -> tuple[int, ...]:
    """Lead-time set: asset override, else owner setting, else default."""
    if asset.notify_days_override:
        return asset.notify_days_override
    if owner is not None and owner.notify_days:
        return owner.notify_days
    return DEFAULT_NOTIFY_DAYS


def should_notify(days: int, notify_days: tuple[int, ...]) -> bool:
    """Due today or overdue always fires; otherwise only on a lead-time day."""
    if days <= 0:
        return True
    return days in notify_days


def classify_severity(days: int) -> Severity:
    if days > 0:
        return Severity.UPCOMING
    if days == 0:
        return Severity.DUE_TODAY
    return Severity.OVERDUE


def decide(
    asset: Asset,
    owner: OwnerPreferences | None,
    evaluation_date: date | None = None,
    templates: MessageTemplates = ZH,
) -> NotificationDecision | None:
    """Decide whether `asset` triggers a notification on `evaluation_date`.

    Returns None when:
    - notifications are disabled on the asset (overrides everything else)
    - the owner has no email address
    - the asset is not yet due and today is not a lead-time day

    Otherwise returns a decision with one email event and, when the owner
    has a chat token, one chat event carrying the same information.
    """
    if asset.notification_enabled is False:
        return None

    if owner is None or not owner.email:
        return None

    today = evaluation_date or local_today()
    days = days_until_expiry(asset.expiry_date, today)

    if not should_notify(days, effective_notify_days(asset, owner)):
        return None

    severity = classify_severity(days)
    subject = build_subject(asset.name, severity, days, templates)

    events = [
        NotificationEvent(
            asset_id=asset.id,
            asset_name=asset.name,
            owner_id=owner.owner_id,
            expiry_date=asset.expiry_date,
            days_until_expiry=days,
            severity=severity,
            channel=Channel.EMAIL,
            recipient=owner.email,
            subject=subject,
            body=build_email_html(asset.name, severity, days, asset.expiry_date, templates),
        )
    ]

    if owner.chat_token:
        events.append(
            NotificationEvent(
                asset_id=asset.id,
                asset_name=asset.name,
                owner_id=owner.owner_id,
                expiry_date=asset.expiry_date,
                days_until_expiry=days,
                severity=severity,
                channel=Channel.CHAT,
                recipient=owner.chat_token,
                subject=subject,
                body=build_chat_content(asset.name, severity, days, asset.expiry_date, templates),
            )
        )

    return NotificationDecision(
        asset=asset,
        owner=owner,
        days_until_expiry=days,
        severity=severity,
        events=tuple(events),
    )
