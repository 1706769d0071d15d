"""Visited registry — grants exactly one traversal per folder id."""

from __future__ import annotations

import threading


class VisitedRegistry:
    """Thread-safe claim set for folder ids.

    The first ``claim`` of an id wins; every later claim only bumps the
    id's seen-count. Shared folders and cycles in the remote graph are
    therefore traversed once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._seen: dict[str, int] = {}

    def claim(self, folder_id: str) -> bool:
        with self._lock:
            if folder_id in self._seen:
                self._seen[folder_id] += 1
                return False
            self._seen[folder_id] = 0
            return True

    def seen_count(self, folder_id: str) -> int:
        """Number of times ``folder_id`` was referenced after its first claim."""
        with self._lock:
            return self._seen.get(folder_id, 0)

    def __contains__(self, folder_id: object) -> bool:
        with self._lock:
            return folder_id in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
