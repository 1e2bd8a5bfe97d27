"""
Expiry Reminder — Data Models.

Typed records the notifier works on. Raw rows from the directory are
validated into these shapes at the load boundary (see data/records.py);
core modules never read untyped rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

DEFAULT_NOTIFY_DAYS: tuple[int, ...] = (30, 7, 1)


class Channel(str, Enum):
    EMAIL = "email"
    CHAT = "chat"


class Severity(str, Enum):
    UPCOMING = "upcoming"
    DUE_TODAY = "due-today"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class Asset:
    """A tracked expiring item (U-Key, CA certificate, domain, ...).

    Created, edited and deleted by its owner; the notifier only reads it.
    """

    id: str
    owner_id: str
    name: str
    expiry_date: date
    notification_enabled: bool = True
    notify_days_override: tuple[int, ...] | None = None
    asset_type: str = "Other"            # e.g. "U-Key", "CA", "Domain"
    renewal_method: str = ""             # e.g. "柜台办理", "在线续费"
    websites: tuple[str, ...] = ()
    notes: str = ""


@dataclass(frozen=True)
class OwnerPreferences:
    """Per-account notification settings joined with the account email."""

    owner_id: str
    email: str | None = None
    chat_token: str | None = None        # PushPlus token; None → chat skipped
    notify_days: tuple[int, ...] = field(default=DEFAULT_NOTIFY_DAYS)


@dataclass(frozen=True)
class NotificationEvent:
    """One outbound message for one asset on one channel."""

    asset_id: str
    asset_name: str
    owner_id: str
    expiry_date: date
    days_until_expiry: int
    severity: Severity
    channel: Channel
    recipient: str                       # email address or chat token
    subject: str
    body: str


@dataclass(frozen=True)
class NotificationDecision:
    """Outcome of evaluating one asset on one day when a notification fires."""

    asset: Asset
    owner: OwnerPreferences
    days_until_expiry: int
    severity: Severity
    events: tuple[NotificationEvent, ...]

    def for_channel(self, channel: Channel) -> list[NotificationEvent]:
        return [ev for ev in self.events if ev.channel == channel]


@dataclass
class DispatchResult:
    """Result of one dispatch attempt (success or failure)."""

    channel: Channel
    recipient: str
    asset_id: str
    response: dict | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        d: dict = {
            "channel": self.channel.value,
            "recipient": self.recipient,
            "asset_id": self.asset_id,
        }
        if self.error is not None:
            d["error"] = self.error
        else:
            d["response"] = self.response
        return d


@dataclass
class SkippedRecord:
    """A directory row quarantined at the load boundary."""

    kind: str                            # "asset" | "account" | "profile"
    record_id: str
    reason: str

    def to_dict(self) -> dict:
        return {"kind": self.kind, "id": self.record_id, "reason": self.reason}


@dataclass
class NotificationLog:
    """A persisted dispatch attempt, as kept by the dispatch ledger."""

    id: int
    asset_id: str
    owner_id: str
    channel: str
    recipient: str
    status: str                          # "sent" | "failed"
    detail: str
    sent_on: str                         # ISO date YYYY-MM-DD (evaluation date)
    created_at: str = ""
