"""
Expiry Reminder — Daily check-and-notify run.

One run: load the directory, evaluate every asset against the evaluation
date, dispatch the resulting emails and chat pushes, and report what was
sent together with the full log trace.

This module is provider-agnostic: it depends on DirectoryPort, EmailPort
and ChatPort protocols, not on specific implementations.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from expiry_reminder.core.dispatcher import DispatchSummary, dispatch
from expiry_reminder.core.expiry_rules import (
    days_until_expiry,
    decide,
    effective_notify_days,
    local_today,
)
from expiry_reminder.core.loader import load_directory
from expiry_reminder.core.messages import get_templates
from expiry_reminder.core.run_log import RunLog
from expiry_reminder.core.throttle import FixedIntervalThrottle
from expiry_reminder.data.models import NotificationDecision, NotificationEvent

if TYPE_CHECKING:
    from expiry_reminder.config import Settings
    from expiry_reminder.data.db import NotificationLogDB
    from expiry_reminder.data.models import Asset, DispatchResult, OwnerPreferences, SkippedRecord
    from expiry_reminder.ports.directory_port import DirectoryPort
    from expiry_reminder.ports.notification_port import ChatPort, EmailPort


@dataclass
class CheckReport:
    """Outcome of one run: either a dispatch summary or a fatal error."""

    logs: list[str]
    sent: int = 0
    details: list[DispatchResult] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"error": self.error, "logs": self.logs}
        return {
            "sent": self.sent,
            "details": [r.to_dict() for r in self.details],
            "skipped": [s.to_dict() for s in self.skipped],
            "logs": self.logs,
        }


# ---------------------------------------------------------------------------
# Decision pass
# ---------------------------------------------------------------------------


def evaluate_assets(
    assets: list[Asset],
    owners: dict[str, OwnerPreferences],
    evaluation_date: date,
    run_log: RunLog,
    locale: str = "zh",
) -> list[NotificationDecision]:
    """Run the decision rule over every asset, logging each outcome."""
    templates = get_templates(locale)
    decisions: list[NotificationDecision] = []

    for asset in assets:
        owner = owners.get(asset.owner_id)
        email = owner.email if owner is not None else None

        run_log.info(f"Checking asset: {asset.name} (ID: {asset.id})")
        run_log.info(f"  User ID: {asset.owner_id}")
        run_log.info(f"  User Email: {email or 'NOT FOUND'}")
        run_log.info(f"  Notification Enabled: {asset.notification_enabled}")
        run_log.info(f"  Expiry Date: {asset.expiry_date.isoformat()}")

        if asset.notification_enabled is False:
            run_log.info("  Skipping: Notification disabled")
            continue
        if not email:
            run_log.info("  Skipping: User email not found")
            continue

        days = days_until_expiry(asset.expiry_date, evaluation_date)
        run_log.info(f"  Days until expiry: {days}")

        decision = decide(asset, owner, evaluation_date, templates)
        if decision is None:
            notify_days = ", ".join(str(d) for d in effective_notify_days(asset, owner))
            run_log.info(f"  Not notifying today (Not in notify_days: {notify_days})")
            continue

        run_log.info(f"  >>> Adding to notification list ({decision.severity.value})")
        decisions.append(decision)

    return decisions


async def _drop_already_sent(
    decisions: list[NotificationDecision],
    ledger: NotificationLogDB,
    evaluation_date: date,
    run_log: RunLog,
) -> list[NotificationDecision]:
    """Remove events that the ledger shows were already sent today."""
    kept: list[NotificationDecision] = []
    for decision in decisions:
        events: list[NotificationEvent] = []
        for event in decision.events:
            if await asyncio.to_thread(
                ledger.has_sent, event.asset_id, event.channel.value, evaluation_date,
            ):
                run_log.info(
                    f"Skipping {event.channel.value} for {event.asset_name}: already sent today"
                )
                continue
            events.append(event)
        if events:
            kept.append(
                NotificationDecision(
                    asset=decision.asset,
                    owner=decision.owner,
                    days_until_expiry=decision.days_until_expiry,
                    severity=decision.severity,
                    events=tuple(events),
                )
            )
    return kept


def _record_results(
    summary: DispatchSummary,
    decisions: list[NotificationDecision],
    ledger: NotificationLogDB,
    evaluation_date: date,
) -> None:
    owner_by_asset = {d.asset.id: d.owner.owner_id for d in decisions}
    for result in summary.results:
        ledger.record(
            asset_id=result.asset_id,
            owner_id=owner_by_asset.get(result.asset_id, ""),
            channel=result.channel.value,
            recipient=result.recipient,
            status="sent" if result.ok else "failed",
            sent_on=evaluation_date,
            detail=result.error or "",
        )


# ---------------------------------------------------------------------------
# Full run
# ---------------------------------------------------------------------------


async def run_check(
    directory: DirectoryPort,
    email_sender: EmailPort | None,
    chat_sender: ChatPort | None,
    settings: Settings,
    evaluation_date: date | None = None,
    ledger: NotificationLogDB | None = None,
    throttle: FixedIntervalThrottle | None = None,
) -> CheckReport:
    """Run one full check-and-notify cycle.

    Args:
        directory: Source of assets, accounts and profiles.
        email_sender: Email transport, or None when no API key is configured.
        chat_sender: Chat transport, or None to skip chat pushes.
        settings: Process-wide configuration.
        evaluation_date: Day to evaluate; defaults to today in settings.TIMEZONE.
        ledger: Dispatch ledger; every attempt is recorded when provided,
            and already-sent events are dropped when DEDUPE_SAME_DAY is on.
        throttle: Email spacing; defaults to EMAIL_SEND_INTERVAL_SECONDS.

    A failure while loading aborts the run and is reported in
    CheckReport.error; send failures never abort it.
    """
    run_log = RunLog()
    run_log.info("Starting check-expiry run...")

    if email_sender is None:
        run_log.error("ERROR: RESEND_API_KEY is not set")
    else:
        run_log.info("RESEND_API_KEY is present")

    today = evaluation_date or local_today(settings.TIMEZONE)
    run_log.info(f"Evaluation date: {today.isoformat()}")

    try:
        loaded = await load_directory(directory, run_log, settings.DEFAULT_NOTIFY_DAYS)
        decisions = evaluate_assets(
            loaded.assets, loaded.owners, today, run_log, settings.MESSAGE_LOCALE,
        )
    except Exception as exc:
        run_log.error(f"FATAL ERROR: {exc}")
        return CheckReport(logs=run_log.lines, error=str(exc))

    if ledger is not None and settings.DEDUPE_SAME_DAY:
        decisions = await _drop_already_sent(decisions, ledger, today, run_log)

    if throttle is None:
        throttle = FixedIntervalThrottle(settings.EMAIL_SEND_INTERVAL_SECONDS)
    summary = await dispatch(decisions, email_sender, chat_sender, throttle, run_log)

    if ledger is not None:
        try:
            await asyncio.to_thread(_record_results, summary, decisions, ledger, today)
        except Exception as exc:
            run_log.error(f"Failed to record dispatch log: {exc}")

    run_log.info(f"Done: {summary.attempts} dispatch attempts, {len(summary.failures)} failed")
    return CheckReport(
        logs=run_log.lines,
        sent=summary.attempts,
        details=summary.results,
        skipped=loaded.skipped,
    )
