"""Resend email adapter — implements EmailPort.

Posts `{from, to, subject, html}` to the Resend API with a bearer key.
Non-2xx responses raise DispatchError carrying the provider's message.
"""

from __future__ import annotations

import logging

import httpx

from expiry_reminder.ports.notification_port import DispatchError

logger = logging.getLogger(__name__)


class ResendEmailSender:
    """Resend implementation of EmailPort."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._api_url = api_url
        self._timeout = timeout

    async def send_email(self, to: str, subject: str, html: str) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._api_url,
                    json={
                        "from": self._sender,
                        "to": to,
                        "subject": subject,
                        "html": html,
                    },
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise DispatchError(
                f"Resend returned {exc.response.status_code}: {_error_message(exc.response)}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise DispatchError(f"Resend request failed: {exc}") from exc

        logger.info("Email accepted by Resend for %s (id=%s)", to, data.get("id"))
        return data


def _error_message(resp: httpx.Response) -> str:
    """Best-effort extraction of the provider's error message."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
