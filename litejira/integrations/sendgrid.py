"""SendGrid email integration client.

Uses real SendGrid API when a valid key is configured, otherwise
falls back to logging-only mock mode.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx

from litejira.config import settings
from litejira.integrations.base import BaseIntegration

_TAG_RE = re.compile(r"<[^>]*>")


def html_to_text(html: str) -> str:
    return _TAG_RE.sub("", html)


class EmailClient(BaseIntegration):
    """Email client with real SendGrid API and mock fallback.

    ``send_email`` never raises: failures come back as ``{"status": "failed"}``.
    """

    SENDGRID_URL = "https://api.sendgrid.com/v3"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__("sendgrid")
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return not settings.SENDGRID_API_KEY.startswith("mock_")

    async def health_check(self) -> bool:
        if not self.is_configured:
            self.logger.info("SendGrid health check: OK (mock)")
            return True
        try:
            async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
                resp = await client.get(
                    f"{self.SENDGRID_URL}/scopes",
                    headers={"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"},
                )
                return resp.status_code == 200
        except httpx.HTTPError as e:
            self.logger.error("SendGrid health check failed: %s", e)
            return False

    async def send_email(
        self, to: str, subject: str, html_body: str, from_email: str | None = None,
    ) -> dict[str, Any]:
        sender = from_email or settings.FROM_EMAIL
        message_id = str(uuid.uuid4())
        timestamp = datetime.now(timezone.utc).isoformat()

        if not self.is_configured:
            self.logger.info("Mock email | from=%s | to=%s | subject='%s'", sender, to, subject)
            return {"status": "sent", "message_id": message_id, "to": to, "subject": subject, "timestamp": timestamp}

        self.logger.info("Sending email to=%s subject='%s'", to, subject)
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": sender},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": html_to_text(html_body)},
                {"type": "text/html", "value": html_body},
            ],
        }
        try:
            async with httpx.AsyncClient(timeout=30, transport=self._transport) as client:
                resp = await client.post(
                    f"{self.SENDGRID_URL}/mail/send",
                    headers={
                        "Authorization": f"Bearer {settings.SENDGRID_API_KEY}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.error("SendGrid email to %s failed: %s", to, e)
            return {"status": "failed", "error": str(e), "to": to}

        sg_id = resp.headers.get("X-Message-Id", message_id)
        self.logger.info("Email sent via SendGrid: %s", sg_id)
        return {"status": "sent", "message_id": sg_id, "to": to, "subject": subject, "timestamp": timestamp}
