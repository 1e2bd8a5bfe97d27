"""PushPlus chat adapter — implements ChatPort.

Pushes an HTML message to the owner's WeChat through PushPlus. PushPlus
answers HTTP 200 even on failure, so a body `code` other than 200 is
treated as a failed send.
"""

from __future__ import annotations

import logging

import httpx

from expiry_reminder.ports.notification_port import DispatchError

logger = logging.getLogger(__name__)

_OK_CODE = 200


class PushPlusChatSender:
    """PushPlus implementation of ChatPort."""

    def __init__(
        self,
        api_url: str = "http://www.pushplus.plus/send",
        timeout: float = 10.0,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout

    async def send_chat(self, token: str, title: str, content: str) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._api_url,
                    json={
                        "token": token,
                        "title": title,
                        "content": content,
                        "template": "html",
                    },
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise DispatchError(f"PushPlus request failed: {exc}") from exc

        if data.get("code") != _OK_CODE:
            raise DispatchError(f"PushPlus rejected message: {data.get('msg', data)}")

        logger.info("Chat push accepted by PushPlus (token %s...)", token[:5])
        return data
