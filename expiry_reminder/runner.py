"""
Expiry Reminder — Run wiring.

Builds the configured adapters once and runs check cycles with them.
Shared by the HTTP endpoint, the `--once` command and the daily scheduler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from expiry_reminder.adapters.adapter_factory import (
    create_chat_sender,
    create_directory,
    create_email_sender,
    create_ledger,
)
from expiry_reminder.core.check_expiry import CheckReport, run_check

if TYPE_CHECKING:
    from expiry_reminder.config import Settings
    from expiry_reminder.data.db import NotificationLogDB
    from expiry_reminder.ports.directory_port import DirectoryPort
    from expiry_reminder.ports.notification_port import ChatPort, EmailPort

logger = logging.getLogger(__name__)


@dataclass
class Ports:
    """The collaborators one check run talks to."""

    directory: DirectoryPort
    email_sender: EmailPort | None
    chat_sender: ChatPort | None
    ledger: NotificationLogDB | None = None


def build_ports(settings: Settings) -> Ports:
    """Create the adapters selected by `settings`."""
    ports = Ports(
        directory=create_directory(settings),
        email_sender=create_email_sender(settings),
        chat_sender=create_chat_sender(settings),
        ledger=create_ledger(settings),
    )
    logger.info(
        "Ports ready: directory=%s, email=%s",
        settings.DIRECTORY_PROVIDER,
        "resend" if ports.email_sender is not None else "disabled",
    )
    return ports


async def run_once(
    settings: Settings,
    ports: Ports | None = None,
    evaluation_date: date | None = None,
) -> CheckReport:
    """Run a single check-and-notify cycle with the configured ports."""
    if ports is None:
        ports = build_ports(settings)
    report = await run_check(
        ports.directory,
        ports.email_sender,
        ports.chat_sender,
        settings,
        evaluation_date=evaluation_date,
        ledger=ports.ledger,
    )
    if report.ok:
        logger.info("Check run finished: %d sent, %d skipped", report.sent, len(report.skipped))
    else:
        logger.error("Check run failed: %s", report.error)
    return report
