#!/usr/bin/env python3
"""One-time helper that exchanges a Google OAuth consent code for a refresh token.

Run it locally, open the printed URL signed in as the workspace user, click
Allow, then paste the code back. Store the printed value as GOOGLE_REFRESH_TOKEN.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from urllib.parse import urlencode

import httpx

# Ensure `ahp_ops` package is importable when script is run directly.
CURRENT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = CURRENT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ahp_ops.core.config import PLACEHOLDER_VALUES, get_settings
from ahp_ops.services.google_auth import SCOPES, TOKEN_URL


AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"


def build_consent_url(client_id: str) -> str:
    params = {
        "client_id": client_id,
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        # Forces a refresh token even when the app was authorized before.
        "prompt": "consent",
    }
    return f"{AUTH_URL}?{urlencode(params)}"


def exchange_code(code: str, client_id: str, client_secret: str) -> dict:
    resp = httpx.post(
        TOKEN_URL,
        data={
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": REDIRECT_URI,
            "grant_type": "authorization_code",
        },
        timeout=30.0,
    )
    return resp.json()


def main() -> int:
    parser = argparse.ArgumentParser(description="Obtain GOOGLE_REFRESH_TOKEN for the operations agent.")
    parser.add_argument("--code", help="Authorization code (prompted for when omitted).")
    args = parser.parse_args()

    settings = get_settings()
    client_id = (settings.google_client_id or "").strip()
    client_secret = (settings.google_client_secret or "").strip()
    if client_id in PLACEHOLDER_VALUES or client_secret in PLACEHOLDER_VALUES:
        print("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set in .env", file=sys.stderr)
        return 1

    if not args.code:
        print("\n1. Open this URL in your browser (sign in as the workspace user):\n")
        print(build_consent_url(client_id))
        print("\n2. Click Allow and copy the authorization code shown on screen.\n")

    code = (args.code or input("Paste the authorization code here: ")).strip()
    if not code:
        print("No code entered.", file=sys.stderr)
        return 1

    try:
        data = exchange_code(code, client_id, client_secret)
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        return 1

    if data.get("error"):
        print(f"Error exchanging code: {data.get('error')} {data.get('error_description', '')}", file=sys.stderr)
        return 1

    refresh_token = data.get("refresh_token")
    if not refresh_token:
        print(
            "No refresh_token returned. Revoke access at https://myaccount.google.com/permissions and re-run.",
            file=sys.stderr,
        )
        return 1

    print("\nAdd this to your .env file:\n")
    print(f"GOOGLE_REFRESH_TOKEN={refresh_token}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
