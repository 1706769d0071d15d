"""Google Drive v3 REST client authenticated with OAuth user credentials."""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError
from urllib.parse import quote, urlencode

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request

from drive_untrash.config import DEFAULT_REQUEST_TIMEOUT
from drive_untrash.drive.models import (
    FIELD_EXPLICITLY_TRASHED,
    FIELD_FILES,
    FIELD_ID,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    FIELD_NEXT_PAGE_TOKEN,
)

if TYPE_CHECKING:
    from google.oauth2.credentials import Credentials

    from drive_untrash.config import AppConfig

logger = logging.getLogger(__name__)

DRIVE_BASE_URL = "https://www.googleapis.com/drive/v3"

LIST_FIELDS = (
    f"{FIELD_NEXT_PAGE_TOKEN}, {FIELD_FILES}("
    f"{FIELD_ID}, {FIELD_NAME}, {FIELD_MIME_TYPE}, {FIELD_EXPLICITLY_TRASHED})"
)


class DriveAuthError(Exception):
    """Raised when OAuth credentials cannot be loaded, refreshed or obtained."""


class DriveApiError(Exception):
    """Raised when the Drive API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str, reason: str | None = None) -> None:
        detail = f"Drive API error {status_code}: {message}"
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(detail)
        self.status_code = status_code
        self.message = message
        self.reason = reason


def _parse_error(exc: HTTPError) -> DriveApiError:
    """Map an HTTPError carrying Google's JSON error envelope to a DriveApiError."""
    message = str(exc.reason)
    reason = None
    try:
        error = json.loads(exc.read()).get("error", {})
        message = error.get("message", message)
        errors = error.get("errors") or []
        if errors:
            reason = errors[0].get("reason")
    except (ValueError, AttributeError):
        pass
    return DriveApiError(exc.code, message, reason)


class DriveClient:
    """Authenticated client for the Google Drive v3 API.

    Safe to share between worker threads: token refresh is serialized and
    each request opens its own connection.
    """

    def __init__(self, credentials: Credentials, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        """Initialise the client.

        Args:
            credentials: OAuth user credentials with the Drive scope.
            timeout: Seconds each request may block on connect or read.
        """
        self._credentials = credentials
        self._timeout = timeout
        self._token_lock = threading.Lock()

    def _acquire_token(self) -> str:
        """Return a valid Bearer token, refreshing the credentials if needed.

        Raises:
            DriveAuthError: If the token cannot be refreshed.
        """
        with self._token_lock:
            if not self._credentials.valid:
                try:
                    self._credentials.refresh(Request())
                except RefreshError as exc:
                    logger.error("[_acquire_token] token refresh failed; error:%s", exc)
                    raise DriveAuthError(f"Token refresh failed: {exc}") from exc
            return str(self._credentials.token)

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform an authenticated request and decode the JSON response.

        Raises:
            DriveAuthError: If token acquisition fails.
            DriveApiError: If the API returns a non-2xx status code.
            TimeoutError: If the server does not answer within the timeout.
            URLError: If the connection cannot be established.
        """
        token = self._acquire_token()
        url = f"{DRIVE_BASE_URL}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"
        req = urllib_request.Request(url, data=data, headers=headers, method=method)
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                raw = resp.read()
                return json.loads(raw) if raw else {}  # type: ignore[no-any-return]
        except HTTPError as exc:
            raise _parse_error(exc) from exc

    def list_files(
        self,
        query: str,
        page_token: str | None = None,
        page_size: int = 1000,
    ) -> dict[str, Any]:
        """List one page of files matching a Drive search query.

        Args:
            query: Drive search expression for the ``q`` parameter.
            page_token: Continuation token from the previous page, if any.
            page_size: Number of entries to request.

        Returns:
            Raw response with ``files`` and, unless this is the last page,
            ``nextPageToken``.
        """
        params: dict[str, Any] = {
            "q": query,
            "pageSize": page_size,
            "fields": LIST_FIELDS,
        }
        if page_token:
            params["pageToken"] = page_token
        return self._request("GET", "/files", params=params)

    def untrash(self, file_id: str) -> dict[str, Any]:
        """Clear the trashed flag of a file or folder.

        Untrashing an item that is not in the trash is a no-op on the server.
        """
        return self._request("PATCH", f"/files/{quote(file_id, safe='')}", body={"trashed": False})


def drive_client_from_config(config: AppConfig, interactive: bool = True) -> DriveClient:
    """Construct a DriveClient from application configuration.

    Args:
        config: Application configuration instance.
        interactive: Whether the browser OAuth flow may run when no usable
            cached token exists.

    Returns:
        Configured DriveClient instance.

    Raises:
        DriveAuthError: If credentials cannot be obtained.
    """
    from drive_untrash.drive.auth import load_credentials

    credentials = load_credentials(
        client_secret_file=config.client_secret_file,
        token_file=config.token_file,
        interactive=interactive,
    )
    return DriveClient(credentials, timeout=config.request_timeout)
