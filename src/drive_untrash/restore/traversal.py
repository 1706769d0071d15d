"""Traversal engine — claims each folder once, pages its listing and fans out."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from drive_untrash.drive.pages import PageFetchError
from drive_untrash.restore.barrier import Counter
from drive_untrash.restore.registry import VisitedRegistry

if TYPE_CHECKING:
    from drive_untrash.drive.models import FolderScope
    from drive_untrash.drive.pages import PageFetcher
    from drive_untrash.restore.barrier import TaskGroup
    from drive_untrash.restore.dispatcher import RestoreDispatcher

logger = logging.getLogger(__name__)


class TraversalEngine:
    """Walks a folder tree concurrently, restoring trashed items along the way.

    Every folder listing runs as its own task on the shared task group.
    Pages are handed off as they arrive, so memory stays bounded by one
    page per active listing however large a folder is.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        dispatcher: RestoreDispatcher,
        tasks: TaskGroup,
        registry: VisitedRegistry | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            fetcher: PageFetcher used for every listing call.
            dispatcher: RestoreDispatcher receiving each page.
            tasks: TaskGroup that runs listing and restore tasks.
            registry: Claim set shared across the run; a fresh one by default.
        """
        self._fetcher = fetcher
        self._dispatcher = dispatcher
        self._tasks = tasks
        self.registry = registry if registry is not None else VisitedRegistry()
        self.folders_processed = Counter()
        self.listing_failures = Counter()

    def schedule(self, scope: FolderScope) -> None:
        """Queue ``traverse(scope)`` as a task on the task group."""
        self._tasks.spawn(self.traverse, scope)

    def traverse(self, scope: FolderScope) -> bool:
        """List one scope, dispatch its restores and schedule its subfolders.

        The store root is never claimed. Its unscoped listing already holds
        every folder and trashed item of the store, so no subfolder
        traversal is scheduled from it.

        Returns:
            False when the scope was already claimed or its listing failed.
        """
        if not scope.is_store_root and not self.registry.claim(scope.id):
            logger.debug(
                "[traverse] already processed; folder_id:%s;name:%s;seen:%d",
                scope.id,
                scope.name,
                self.registry.seen_count(scope.id),
            )
            return False

        self.folders_processed.increment()
        logger.debug("[traverse] restore trash in; folder_id:%s;name:%s", scope.id or "root", scope.name)

        page_token: str | None = None
        item_count = 0
        while True:
            try:
                page = self._fetcher.fetch_page(scope, page_token)
            except PageFetchError as exc:
                self.listing_failures.increment()
                logger.error(
                    "[traverse] unable to list; folder_id:%s;name:%s;error:%s",
                    scope.id or "root",
                    scope.name,
                    exc,
                )
                return False

            item_count += len(page.items)
            self._dispatcher.dispatch(page, scope)
            if not scope.is_store_root:
                for item in page.items:
                    if item.is_folder:
                        self.schedule(item.as_scope())

            if page.is_last:
                break
            page_token = page.next_token

        logger.debug(
            "[traverse] listing complete; folder_id:%s;name:%s;item_count:%d",
            scope.id or "root",
            scope.name,
            item_count,
        )
        return True
