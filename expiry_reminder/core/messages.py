"""Notification message templates — pure formatting.

Builds the subject line, the email HTML card and the short chat body for
an asset given its severity and day count. Text is chosen by locale
("zh", the default, or "en").

No I/O: this module only transforms data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from html import escape

from expiry_reminder.data.models import Severity


@dataclass(frozen=True)
class MessageTemplates:
    """Locale-specific text fragments."""

    subject_upcoming: str
    subject_due_today: str
    subject_overdue: str
    status_upcoming: str
    status_due_today: str
    status_overdue: str
    short_upcoming: str
    short_due_today: str
    short_overdue: str
    status_label_upcoming: str
    status_label: str
    heading: str
    greeting: str
    attention: str
    expiry_label: str
    footer: str


ZH = MessageTemplates(
    subject_upcoming="[提醒] {name} 还有 {days} 天到期",
    subject_due_today="[紧急] {name} 今天到期！",
    subject_overdue="[严重过期] {name} 已过期 {days} 天！",
    status_upcoming="{days} 天",
    status_due_today="今天到期",
    status_overdue="已过期 {days} 天",
    short_upcoming="{days} 天",
    short_due_today="今天到期",
    short_overdue="过期 {days} 天",
    status_label_upcoming="剩余天数：",
    status_label="状态：",
    heading="🔔 资产状态提醒",
    greeting="您好，",
    attention="您的资产 {name} 需要关注。",
    expiry_label="到期日期：",
    footer="来自 U盾/CA 提醒助手",
)

EN = MessageTemplates(
    subject_upcoming="[Reminder] {name} expires in {days} days",
    subject_due_today="[Urgent] {name} expires today!",
    subject_overdue="[Critical] {name} overdue by {days} days!",
    status_upcoming="{days} days remaining",
    status_due_today="Expires today",
    status_overdue="Overdue by {days} days",
    short_upcoming="{days} days remaining",
    short_due_today="Expires today",
    short_overdue="Overdue by {days} days",
    status_label_upcoming="Status: ",
    status_label="Status: ",
    heading="🔔 Asset expiry reminder",
    greeting="Hello,",
    attention="Your asset {name} needs attention.",
    expiry_label="Expiry date: ",
    footer="Sent by the U-Key/CA expiry reminder",
)

TEMPLATES: dict[str, MessageTemplates] = {"zh": ZH, "en": EN}

_AMBER = "#D97706"
_RED = "#DC2626"


def get_templates(locale: str) -> MessageTemplates:
    """Return the templates for a locale, raising ValueError if unknown."""
    try:
        return TEMPLATES[locale]
    except KeyError:
        raise ValueError(f"Unknown message locale: {locale!r}") from None


def _display_days(days: int) -> int:
    # Overdue messages show how many days have passed
    return abs(days)


def build_subject(name: str, severity: Severity, days: int, t: MessageTemplates = ZH) -> str:
    if severity is Severity.UPCOMING:
        return t.subject_upcoming.format(name=name, days=days)
    if severity is Severity.DUE_TODAY:
        return t.subject_due_today.format(name=name)
    return t.subject_overdue.format(name=name, days=_display_days(days))


def build_status(severity: Severity, days: int, t: MessageTemplates = ZH) -> str:
    """The status fragment, e.g. "Overdue by 3 days"."""
    if severity is Severity.UPCOMING:
        return t.status_upcoming.format(days=days)
    if severity is Severity.DUE_TODAY:
        return t.status_due_today
    return t.status_overdue.format(days=_display_days(days))


def build_short_status(severity: Severity, days: int, t: MessageTemplates = ZH) -> str:
    if severity is Severity.UPCOMING:
        return t.short_upcoming.format(days=days)
    if severity is Severity.DUE_TODAY:
        return t.short_due_today
    return t.short_overdue.format(days=_display_days(days))


def build_email_html(
    name: str,
    severity: Severity,
    days: int,
    expiry_date: date,
    t: MessageTemplates = ZH,
) -> str:
    """Render the HTML card sent by email."""
    color = _AMBER if severity is Severity.UPCOMING else _RED
    label = t.status_label_upcoming if severity is Severity.UPCOMING else t.status_label
    status = build_status(severity, days, t)
    attention = t.attention.format(name=f"<strong>{escape(name)}</strong>")
    return (
        '<div style="font-family: sans-serif; padding: 20px; color: #333;">'
        f'<h1 style="color: #4F46E5;">{t.heading}</h1>'
        f"<p>{t.greeting}</p>"
        f"<p>{attention}</p>"
        '<div style="background: #FEF2F2; color: #991B1B; padding: 15px; '
        'border-radius: 8px; margin: 20px 0; display: inline-block;">'
        f'{label}<span style="font-weight: bold; font-size: 1.2em; color: {color};">{status}</span>'
        "</div>"
        f"<p>{t.expiry_label}{expiry_date.isoformat()}</p>"
        '<hr style="border: 0; border-top: 1px solid #eee; margin-top: 30px;">'
        f'<p style="font-size: 12px; color: #888;">{t.footer}</p>'
        "</div>"
    )


def build_chat_content(
    name: str,
    severity: Severity,
    days: int,
    expiry_date: date,
    t: MessageTemplates = ZH,
) -> str:
    """Render the short HTML body pushed to the chat channel."""
    attention = t.attention.format(name=f"<b>{escape(name)}</b>")
    short = build_short_status(severity, days, t)
    return (
        f"{attention}<br/>"
        f'{t.status_label}<b style="color:red">{short}</b><br/>'
        f"{t.expiry_label}{expiry_date.isoformat()}"
    )
