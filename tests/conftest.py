"""Pytest configuration — adds src/ to sys.path and provides an in-memory Drive fake."""

import os
import re
import sys
import threading
from collections.abc import Callable
from typing import Any

import pytest

# Add src/ to Python path so tests can import from drive_untrash
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from drive_untrash.drive.client import DriveApiError  # noqa: E402

_PARENT_RE = re.compile(r"^'(?P<id>(?:[^'\\]|\\.)*)' in parents")


class FakeDriveClient:
    """Thread-safe stand-in for DriveClient backed by plain dicts.

    ``folders`` maps a folder id to the raw file resources its listing
    returns (already filtered to folders and trashed items); ``root_items``
    is the unscoped listing. ``list_failures`` and ``untrash_failures`` map
    ids to exceptions raised, in order, before calls start succeeding.
    """

    def __init__(
        self,
        folders: dict[str, list[dict[str, Any]]] | None = None,
        root_items: list[dict[str, Any]] | None = None,
        list_failures: dict[str, list[Exception]] | None = None,
        untrash_failures: dict[str, list[Exception]] | None = None,
    ) -> None:
        self.folders = folders or {}
        self.root_items = root_items or []
        self.list_failures = {k: list(v) for k, v in (list_failures or {}).items()}
        self.untrash_failures = {k: list(v) for k, v in (untrash_failures or {}).items()}
        self.list_calls: list[tuple[str, str | None]] = []
        self.untrash_calls: list[str] = []
        self._lock = threading.Lock()

    def list_files(
        self,
        query: str,
        page_token: str | None = None,
        page_size: int = 1000,
    ) -> dict[str, Any]:
        match = _PARENT_RE.match(query)
        folder_id = match.group("id").replace("\\'", "'") if match else ""
        with self._lock:
            self.list_calls.append((folder_id, page_token))
            pending = self.list_failures.get(folder_id)
            if pending:
                raise pending.pop(0)
        if folder_id:
            if folder_id not in self.folders:
                raise DriveApiError(404, f"File not found: {folder_id}.", "notFound")
            items = self.folders[folder_id]
        else:
            items = self.root_items
        start = int(page_token) if page_token else 0
        response: dict[str, Any] = {"files": items[start : start + page_size]}
        if start + page_size < len(items):
            response["nextPageToken"] = str(start + page_size)
        return response

    def untrash(self, file_id: str) -> dict[str, Any]:
        with self._lock:
            self.untrash_calls.append(file_id)
            pending = self.untrash_failures.get(file_id)
            if pending:
                raise pending.pop(0)
        return {"id": file_id}

    def untrash_count(self, file_id: str) -> int:
        with self._lock:
            return self.untrash_calls.count(file_id)

    def listing_count(self, folder_id: str) -> int:
        """Number of first-page listing calls made for ``folder_id``."""
        with self._lock:
            return sum(1 for fid, token in self.list_calls if fid == folder_id and token is None)


@pytest.fixture
def make_drive() -> Callable[..., FakeDriveClient]:
    """Factory for FakeDriveClient instances."""
    return FakeDriveClient
