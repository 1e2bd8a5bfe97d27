"""
Expiry Reminder — Daily scheduler.

Runs the check-and-notify cycle once a day at CHECK_TIME in TIMEZONE
using the `schedule` library. Each run is independent; a failed run
is logged and the next day's run proceeds as usual.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

import schedule

from expiry_reminder.runner import build_ports, run_once

if TYPE_CHECKING:
    from expiry_reminder.config import Settings
    from expiry_reminder.runner import Ports

logger = logging.getLogger(__name__)


def daily_check_job(settings: Settings, ports: Ports) -> None:
    """One scheduled run. Never raises, so the scheduler keeps going."""
    try:
        report = asyncio.run(run_once(settings, ports))
    except Exception as exc:
        logger.error("Scheduled check run crashed: %s", exc)
        return
    if not report.ok:
        logger.error("Scheduled check run failed: %s", report.error)


def register_daily_check(
    settings: Settings,
    ports: Ports,
    scheduler: schedule.Scheduler | None = None,
) -> schedule.Job:
    """Register the daily run at CHECK_TIME and return the job."""
    scheduler = scheduler or schedule.default_scheduler
    job = (
        scheduler.every().day
        .at(settings.CHECK_TIME, settings.TIMEZONE)
        .do(daily_check_job, settings, ports)
    )
    job.tag("check-expiry")
    logger.info("Daily expiry check scheduled at %s (%s)", settings.CHECK_TIME, settings.TIMEZONE)
    return job


def run_scheduler(settings: Settings, poll_seconds: int = 30) -> None:
    """Block forever, running pending jobs."""
    ports = build_ports(settings)
    register_daily_check(settings, ports)
    logger.info("Scheduler started (next run: %s)", schedule.next_run())
    while True:
        schedule.run_pending()
        time.sleep(poll_seconds)
