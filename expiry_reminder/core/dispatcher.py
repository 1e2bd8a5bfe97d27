"""Dispatch orchestrator — turns decisions into outbound sends.

Two sequential passes: every email event first (spaced by the throttle),
then every chat event (no spacing). Each send is independent; a failure
is recorded in the results and the remaining sends continue.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from expiry_reminder.data.models import Channel, DispatchResult

if TYPE_CHECKING:
    from expiry_reminder.core.run_log import RunLog
    from expiry_reminder.core.throttle import FixedIntervalThrottle
    from expiry_reminder.data.models import NotificationDecision, NotificationEvent
    from expiry_reminder.ports.notification_port import ChatPort, EmailPort

logger = logging.getLogger(__name__)


@dataclass
class DispatchSummary:
    """All dispatch attempts of one run, in send order."""

    results: list[DispatchResult] = field(default_factory=list)

    @property
    def attempts(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> list[DispatchResult]:
        return [r for r in self.results if not r.ok]


def mask_token(token: str) -> str:
    """Show only the first five characters of a chat token."""
    return f"{token[:5]}..."


def _recipient_label(event: NotificationEvent) -> str:
    if event.channel is Channel.CHAT:
        return mask_token(event.recipient)
    return event.recipient


async def dispatch(
    decisions: list[NotificationDecision],
    email_sender: EmailPort | None,
    chat_sender: ChatPort | None,
    throttle: FixedIntervalThrottle,
    run_log: RunLog,
) -> DispatchSummary:
    """Send every event of `decisions`: emails first, then chat pushes.

    Args:
        decisions: Output of the decision pass, in asset order.
        email_sender: Email transport; None skips the email pass.
        chat_sender: Chat transport; None skips the chat pass.
        throttle: Spacing applied before each email send.
        run_log: Trace collecting one line per attempt.
    """
    summary = DispatchSummary()
    email_events = [ev for d in decisions for ev in d.for_channel(Channel.EMAIL)]

    # 1. Email
    if email_sender is None:
        run_log.info("Skipping email: No API Key")
    elif not email_events:
        run_log.info("Skipping email: No notifications to send")
    else:
        for event in email_events:
            run_log.info(f"Sending email to {event.recipient} for {event.asset_name}...")
            await throttle.wait()
            summary.results.append(
                await _send_one(event, email_sender.send_email(event.recipient, event.subject, event.body), run_log)
            )
            throttle.mark()

    # 2. Chat
    for decision in decisions:
        chat_events = decision.for_channel(Channel.CHAT)
        if not chat_events:
            run_log.info(f"Skipping chat for {decision.asset.name}: No token")
            continue
        if chat_sender is None:
            run_log.info(f"Skipping chat for {decision.asset.name}: No chat transport")
            continue
        for event in chat_events:
            run_log.info(f"Sending chat to token {mask_token(event.recipient)} for {event.asset_name}...")
            summary.results.append(
                await _send_one(event, chat_sender.send_chat(event.recipient, event.subject, event.body), run_log)
            )

    if summary.failures:
        logger.warning(
            "Dispatch finished with %d/%d failures",
            len(summary.failures), summary.attempts,
        )
    return summary


async def _send_one(event: NotificationEvent, send, run_log: RunLog) -> DispatchResult:
    """Await one provider call and wrap the outcome as a DispatchResult."""
    recipient = _recipient_label(event)
    try:
        response = await send
    except Exception as exc:
        run_log.error(f"{event.channel.value} to {recipient} failed: {exc}")
        return DispatchResult(
            channel=event.channel,
            recipient=recipient,
            asset_id=event.asset_id,
            error=str(exc) or type(exc).__name__,
        )
    run_log.info(f"{event.channel.value} response: {json.dumps(response, ensure_ascii=False, default=str)}")
    return DispatchResult(
        channel=event.channel,
        recipient=recipient,
        asset_id=event.asset_id,
        response=response,
    )
