"""Password-reset link delivery through an outbound webhook.

The webhook receiver (a mail relay, a chat bot) is responsible for reaching the user.
"""

from typing import Optional

import httpx


class ResetLinkNotifier:

    def __init__(self, url: str, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def send(self, email: str, username: str, reset_url: str) -> None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(
                self.url,
                json={"email": email, "username": username, "resetUrl": reset_url},
            )
            resp.raise_for_status()
