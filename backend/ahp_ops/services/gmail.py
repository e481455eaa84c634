"""Gmail API client for client recaps and owner alerts."""
from __future__ import annotations

import base64
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Dict, Optional

import httpx

from ahp_ops.core.config import Settings, get_settings
from ahp_ops.core.errors import GoogleAPIError
from ahp_ops.core.logging import logger
from ahp_ops.services.google_auth import GoogleTokenProvider, google_token_provider


def build_raw_message(sender: str, from_name: str, to: str, subject: str, body: str) -> str:
    """RFC 2822 plain-text message, base64url-encoded without padding."""
    message = EmailMessage()
    message["From"] = formataddr((from_name, sender))
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body or "", charset="utf-8")
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")


class GmailClient:
    """Sends mail as the configured workspace user."""

    SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token_provider: Optional[GoogleTokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.token_provider = token_provider or google_token_provider
        self._transport = transport

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        from_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        sender = (self.settings.google_workspace_user or "").strip()
        if not sender:
            raise GoogleAPIError("GOOGLE_WORKSPACE_USER is not configured.")
        recipient = str(to or "").strip()
        if not recipient:
            raise GoogleAPIError("No recipient provided.")

        raw = build_raw_message(
            sender=sender,
            from_name=from_name or self.settings.email_from_name,
            to=recipient,
            subject=str(subject or ""),
            body=str(body or ""),
        )
        headers = await self.token_provider.auth_headers()
        async with httpx.AsyncClient(
            timeout=self.settings.google_timeout_seconds, transport=self._transport
        ) as client:
            response = await client.post(self.SEND_URL, headers=headers, json={"raw": raw})
        if response.status_code >= 400:
            raise GoogleAPIError(
                f"Gmail send failed ({response.status_code}): {response.text[:400]}"
            )

        message_id = response.json().get("id")
        logger.info("Email sent", to=recipient, message_id=message_id)
        return {"success": True, "message_id": message_id, "to": recipient}


gmail_client = GmailClient()
