"""OAuth access tokens for the Google Sheets, Gmail and Drive clients."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from ahp_ops.core.config import Settings, get_settings
from ahp_ops.core.errors import GoogleAPIError


TOKEN_URL = "https://oauth2.googleapis.com/token"

SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/drive",
)


class GoogleTokenProvider:
    """Exchanges the stored refresh token for short-lived access tokens."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None

    def is_configured(self) -> bool:
        return self.settings.google_configured()

    async def get_access_token(self) -> str:
        if self._token and self._token_expires_at:
            if datetime.now(timezone.utc) < self._token_expires_at - timedelta(minutes=2):
                return self._token

        if not self.is_configured():
            raise GoogleAPIError(
                "Google credentials are not configured "
                "(GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REFRESH_TOKEN)."
            )

        payload = {
            "client_id": self.settings.google_client_id,
            "client_secret": self.settings.google_client_secret,
            "refresh_token": self.settings.google_refresh_token,
            "grant_type": "refresh_token",
        }
        async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
            response = await client.post(TOKEN_URL, data=payload)
        if response.status_code >= 400:
            raise GoogleAPIError(
                f"Token refresh failed ({response.status_code}): {response.text[:400]}"
            )

        data = response.json()
        self._token = data["access_token"]
        expires_in = int(data.get("expires_in", 3600))
        self._token_expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return self._token

    async def auth_headers(self) -> dict:
        token = await self.get_access_token()
        return {"Authorization": f"Bearer {token}"}


google_token_provider = GoogleTokenProvider()
