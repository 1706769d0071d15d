"""OAuth user credentials for the Drive API, cached in a local token file."""

from __future__ import annotations

import logging
import os

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from drive_untrash.drive.client import DriveAuthError

logger = logging.getLogger(__name__)

# Full Drive scope; untrash needs write access. Delete the cached token
# after changing this.
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]


def load_credentials(
    client_secret_file: str,
    token_file: str,
    interactive: bool = True,
) -> Credentials:
    """Return usable credentials, refreshing or re-authorising as needed.

    Steps:
        1. Load the cached token from ``token_file`` if present.
        2. If it has expired and carries a refresh token, refresh and re-save it.
        3. Otherwise, when ``interactive``, run the installed-app flow from
           ``client_secret_file`` and save the new token.

    Args:
        client_secret_file: Path to the OAuth client secret JSON.
        token_file: Path to the cached user token JSON.
        interactive: Whether the browser flow may be started.

    Returns:
        Valid Credentials with the Drive scope.

    Raises:
        DriveAuthError: If no usable credentials can be obtained.
    """
    credentials = _token_from_file(token_file)
    if credentials is not None and credentials.valid:
        return credentials

    if credentials is not None and credentials.expired and credentials.refresh_token:
        try:
            credentials.refresh(Request())
            _save_token(token_file, credentials)
            return credentials
        except RefreshError as exc:
            logger.warning("[load_credentials] cached token refresh failed; error:%s", exc)

    if not interactive:
        raise DriveAuthError(f"No usable cached token in {token_file}")

    if not os.path.exists(client_secret_file):
        raise DriveAuthError(f"Unable to read client secret file: {client_secret_file}")

    try:
        flow = InstalledAppFlow.from_client_secrets_file(client_secret_file, DRIVE_SCOPES)
    except ValueError as exc:
        raise DriveAuthError(f"Unable to parse client secret file: {exc}") from exc
    credentials = flow.run_local_server(port=0, open_browser=False)
    _save_token(token_file, credentials)
    return credentials


def _token_from_file(token_file: str) -> Credentials | None:
    if not os.path.exists(token_file):
        return None
    try:
        return Credentials.from_authorized_user_file(token_file, DRIVE_SCOPES)  # type: ignore[no-any-return]
    except ValueError as exc:
        logger.warning("[_token_from_file] ignoring malformed token file; path:%s;error:%s", token_file, exc)
        return None


def _save_token(token_file: str, credentials: Credentials) -> None:
    """Write the token JSON readable by the owner only."""
    fd = os.open(token_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(credentials.to_json())
    logger.info("[_save_token] saved credential file; path:%s", token_file)
