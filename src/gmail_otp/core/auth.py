"""Loading previously authorised Gmail credentials into an API service."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import Resource, build

from gmail_otp.core.exceptions import SessionInvalidError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
]


def load_credentials(credentials_path: Path, token_path: Path) -> Credentials:
    """Load cached OAuth credentials for the Gmail API.

    The token file is produced by an out-of-band authorisation step. When it
    lacks the OAuth client id/secret, they are taken from the client secrets
    file (its ``installed`` or ``web`` section). Expired access tokens are
    refreshed transparently by google-auth on first use.

    Args:
        credentials_path: Path to OAuth 2.0 client credentials JSON.
        token_path: Path to the cached authorised-user token JSON.

    Returns:
        Google OAuth2 credentials.

    Raises:
        SessionInvalidError: If the token is missing, unreadable or unusable.
    """
    if not token_path.exists():
        raise SessionInvalidError(
            f"Token file not found: {token_path}. Authorise the Gmail account first."
        )

    try:
        info: dict[str, Any] = json.loads(token_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise SessionInvalidError(f"Failed to read token file {token_path}: {e}") from e

    if not info.get("client_id") or not info.get("client_secret"):
        info = {**_load_client_secrets(credentials_path), **info}
    # Tokens written by other OAuth clients name the access token differently
    if "token" not in info and info.get("access_token"):
        info["token"] = info["access_token"]

    try:
        creds = Credentials.from_authorized_user_info(info, SCOPES)
    except ValueError as e:
        raise SessionInvalidError(f"Token file {token_path} is incomplete: {e}") from e

    logger.info("Loaded Gmail credentials from %s", token_path)
    return creds


def build_gmail_service(creds: Credentials) -> Resource:
    """Build a Gmail API service resource.

    Args:
        creds: Google OAuth2 credentials.

    Returns:
        Gmail API service resource.
    """
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def _load_client_secrets(credentials_path: Path) -> dict[str, str]:
    """Read client_id/client_secret from an OAuth client secrets file."""
    if not credentials_path.exists():
        raise SessionInvalidError(
            f"Credentials file not found: {credentials_path}. "
            "Download it from Google Cloud Console."
        )
    try:
        data = json.loads(credentials_path.read_text(encoding="utf-8"))
        section = data.get("installed") or data.get("web") or {}
        return {
            "client_id": section["client_id"],
            "client_secret": section["client_secret"],
        }
    except (OSError, ValueError, KeyError) as e:
        raise SessionInvalidError(
            f"Invalid credentials file {credentials_path}: {e}"
        ) from e
