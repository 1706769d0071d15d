"""Restore dispatcher — fans out one untrash task per explicitly trashed item."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from drive_untrash.restore.barrier import Counter

if TYPE_CHECKING:
    from drive_untrash.drive.client import DriveClient
    from drive_untrash.drive.models import FolderScope, Page, RemoteItem
    from drive_untrash.restore.barrier import TaskGroup
    from drive_untrash.restore.executor import CallExecutor

logger = logging.getLogger(__name__)


class RestoreDispatcher:
    """Schedules untrash calls for the explicitly trashed items of each page.

    Items trashed only because an ancestor was trashed come back with that
    ancestor and are left alone.
    """

    def __init__(self, client: DriveClient, executor: CallExecutor, tasks: TaskGroup) -> None:
        self._client = client
        self._executor = executor
        self._tasks = tasks
        self.restored = Counter()
        self.failed = Counter()

    def dispatch(self, page: Page, scope: FolderScope) -> int:
        """Schedule a restore for every explicitly trashed item on ``page``.

        Returns:
            Number of restore tasks scheduled.
        """
        scheduled = 0
        for item in page.items:
            if item.explicitly_trashed:
                self._tasks.spawn(self.restore, item, scope)
                scheduled += 1
        return scheduled

    def restore(self, item: RemoteItem, scope: FolderScope) -> bool:
        """Untrash one item; terminal failures are logged and dropped."""
        logger.debug(
            "[restore] restoring; item_id:%s;name:%s;mime_type:%s", item.id, item.name, item.mime_type
        )
        try:
            self._executor.execute(lambda: self._client.untrash(item.id))
        except Exception as exc:
            self.failed.increment()
            logger.error(
                "[restore] unable to restore; item_id:%s;name:%s;scope_id:%s;scope:%s;error:%s",
                item.id,
                item.name,
                scope.id or "root",
                scope.name,
                exc,
            )
            return False
        self.restored.increment()
        return True
