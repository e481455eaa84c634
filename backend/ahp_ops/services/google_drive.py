"""Google Drive client; creates plain-text Google Docs in a shared folder."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx

from ahp_ops.core.config import Settings, get_settings
from ahp_ops.core.errors import GoogleAPIError
from ahp_ops.services.google_auth import GoogleTokenProvider, google_token_provider


GOOGLE_DOC_MIME = "application/vnd.google-apps.document"
MULTIPART_BOUNDARY = "ahp_ops_upload_boundary"


def build_multipart_related(metadata: Dict[str, Any], text: str) -> bytes:
    """Drive multipart upload body: JSON metadata part followed by the media part."""
    parts = [
        f"--{MULTIPART_BOUNDARY}",
        "Content-Type: application/json; charset=UTF-8",
        "",
        json.dumps(metadata),
        f"--{MULTIPART_BOUNDARY}",
        "Content-Type: text/plain; charset=UTF-8",
        "",
        text,
        f"--{MULTIPART_BOUNDARY}--",
        "",
    ]
    return "\r\n".join(parts).encode("utf-8")


class DriveClient:
    UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token_provider: Optional[GoogleTokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.token_provider = token_provider or google_token_provider
        self._transport = transport

    async def create_doc(self, folder_id: str, title: str, content: str) -> Dict[str, Any]:
        """Upload text content and let Drive convert it into a Google Doc."""
        if not str(folder_id or "").strip():
            raise GoogleAPIError("folder_id is required.")

        metadata = {"name": str(title or "Untitled"), "mimeType": GOOGLE_DOC_MIME, "parents": [folder_id]}
        body = build_multipart_related(metadata, str(content or ""))
        headers = await self.token_provider.auth_headers()
        headers["Content-Type"] = f"multipart/related; boundary={MULTIPART_BOUNDARY}"
        async with httpx.AsyncClient(
            timeout=self.settings.google_timeout_seconds, transport=self._transport
        ) as client:
            response = await client.post(
                self.UPLOAD_URL,
                headers=headers,
                params={"uploadType": "multipart", "fields": "id,webViewLink", "supportsAllDrives": "true"},
                content=body,
            )
        if response.status_code >= 400:
            raise GoogleAPIError(
                f"Drive create failed ({response.status_code}): {response.text[:400]}"
            )

        data = response.json()
        return {"success": True, "doc_id": data.get("id"), "doc_url": data.get("webViewLink")}


drive_client = DriveClient()
