"""Boundary records — pydantic shapes of raw directory rows.

The hosted backend returns schemaless JSON rows. Each row is validated here
before it becomes a typed model; a row that fails validation raises
pydantic.ValidationError and is quarantined by the loader.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, field_validator

from expiry_reminder.data.models import Asset, OwnerPreferences


def _parse_day_list(v: object) -> list[int] | None:
    """Accept a list of ints or a comma-separated string; drop negatives."""
    if v is None:
        return None
    if isinstance(v, str):
        # Both English and Chinese commas are used in the settings form
        parts = [p.strip() for p in v.replace("，", ",").split(",")]
        v = [p for p in parts if p]
    if not isinstance(v, (list, tuple)):
        raise ValueError(f"expected a list of days, got {type(v).__name__}")
    days = [d for d in (int(d) for d in v) if d >= 0]
    return sorted(set(days), reverse=True)


class AssetRecord(BaseModel):
    """A row of the `assets` table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    name: str
    expiry_date: date
    notification_enabled: bool | None = True
    notify_advance_days: list[int] | None = None
    type: str | None = None
    renewal_method: str | None = None
    websites: list[str] | None = None
    notes: str | None = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("expiry_date", mode="before")
    @classmethod
    def parse_expiry(cls, v: object) -> object:
        # Timestamps are truncated to their calendar day
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    @field_validator("notify_advance_days", mode="before")
    @classmethod
    def parse_days(cls, v: object) -> list[int] | None:
        return _parse_day_list(v)

    def to_asset(self) -> Asset:
        return Asset(
            id=self.id,
            owner_id=self.user_id,
            name=self.name,
            expiry_date=self.expiry_date,
            # Only an explicit False disables notifications
            notification_enabled=self.notification_enabled is not False,
            notify_days_override=tuple(self.notify_advance_days) if self.notify_advance_days else None,
            asset_type=self.type or "Other",
            renewal_method=self.renewal_method or "",
            websites=tuple(w for w in (self.websites or []) if w.strip()),
            notes=self.notes or "",
        )


class AccountRecord(BaseModel):
    """An entry of the account directory (id → email)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class ProfileRecord(BaseModel):
    """A row of the `profiles` table (per-account notification settings)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    wechat_webhook: str | None = None
    notify_days: list[int] | None = None

    @field_validator("wechat_webhook", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("notify_days", mode="before")
    @classmethod
    def parse_days(cls, v: object) -> list[int] | None:
        return _parse_day_list(v)


def build_owner(
    account: AccountRecord,
    profile: ProfileRecord | None,
    default_notify_days: tuple[int, ...],
) -> OwnerPreferences:
    """Join an account with its (optional) profile."""
    notify_days = default_notify_days
    chat_token = None
    if profile is not None:
        chat_token = profile.wechat_webhook
        if profile.notify_days:
            notify_days = tuple(profile.notify_days)
    return OwnerPreferences(
        owner_id=account.id,
        email=account.email,
        chat_token=chat_token,
        notify_days=notify_days,
    )
