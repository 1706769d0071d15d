"""Page fetcher — one filtered listing page per call, through the call executor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from drive_untrash.config import MAX_PAGE_SIZE
from drive_untrash.drive.models import (
    FIELD_EXPLICITLY_TRASHED,
    FIELD_FILES,
    FIELD_ID,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    FIELD_NEXT_PAGE_TOKEN,
    FOLDER_MIME_TYPE,
    FolderScope,
    Page,
    RemoteItem,
)

if TYPE_CHECKING:
    from drive_untrash.drive.client import DriveClient
    from drive_untrash.restore.executor import CallExecutor

logger = logging.getLogger(__name__)

# Only folders (for recursion) and trashed items (for restore) are listed.
_FOLDER_OR_TRASHED = f"mimeType = '{FOLDER_MIME_TYPE}' or trashed = true"


class PageFetchError(Exception):
    """Raised when a listing page cannot be retrieved."""

    def __init__(self, scope: FolderScope, cause: Exception) -> None:
        super().__init__(f"Unable to retrieve listing for {scope.name!r} ({scope.id or 'root'}): {cause}")
        self.scope = scope


def build_query(scope: FolderScope) -> str:
    """Return the Drive search expression for a scope's folders and trashed items."""
    if scope.is_store_root:
        return _FOLDER_OR_TRASHED
    folder_id = scope.id.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{folder_id}' in parents and ({_FOLDER_OR_TRASHED})"


def parse_item(raw: dict[str, Any]) -> RemoteItem:
    """Map a raw Drive file resource to a RemoteItem."""
    return RemoteItem(
        id=raw.get(FIELD_ID, ""),
        name=raw.get(FIELD_NAME, ""),
        mime_type=raw.get(FIELD_MIME_TYPE, ""),
        explicitly_trashed=bool(raw.get(FIELD_EXPLICITLY_TRASHED, False)),
    )


class PageFetcher:
    """Fetches listing pages for a folder scope."""

    def __init__(
        self,
        client: DriveClient,
        executor: CallExecutor,
        page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._client = client
        self._executor = executor
        self._page_size = min(page_size, MAX_PAGE_SIZE)

    def fetch_page(self, scope: FolderScope, page_token: str | None = None) -> Page:
        """Fetch one page of a scope's listing.

        Args:
            scope: Folder to list, or the store root for an unscoped listing.
            page_token: Continuation token from the previous page; None for the first.

        Returns:
            Page holding the items and the next token (None on the last page).

        Raises:
            PageFetchError: If the call fails terminally.
        """
        query = build_query(scope)
        try:
            response = self._executor.execute(
                lambda: self._client.list_files(query, page_token=page_token, page_size=self._page_size)
            )
        except Exception as exc:
            raise PageFetchError(scope, exc) from exc

        items = [parse_item(raw) for raw in response.get(FIELD_FILES, [])]
        next_token = response.get(FIELD_NEXT_PAGE_TOKEN) or None
        logger.debug(
            "[fetch_page] got page; scope:%s;item_count:%d;has_more:%s",
            scope.name,
            len(items),
            next_token is not None,
        )
        return Page(items=items, next_token=next_token)
