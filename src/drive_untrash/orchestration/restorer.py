"""Trash restorer — wires the engine together and runs one restore to completion."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from drive_untrash.config import MAX_PAGE_SIZE
from drive_untrash.drive.client import DriveClient, drive_client_from_config
from drive_untrash.drive.models import STORE_ROOT, FolderScope
from drive_untrash.drive.pages import PageFetcher
from drive_untrash.restore.barrier import TaskGroup
from drive_untrash.restore.dispatcher import RestoreDispatcher
from drive_untrash.restore.executor import CallExecutor, RetryPolicy
from drive_untrash.restore.registry import VisitedRegistry
from drive_untrash.restore.traversal import TraversalEngine

if TYPE_CHECKING:
    from drive_untrash.config import AppConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestoreReport:
    """Final counts of a run, read after every task has finished."""

    folders_processed: int
    items_restored: int
    restore_failures: int
    listing_failures: int
    retries: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class TrashRestorer:
    """Restores explicitly trashed items below a set of root folders."""

    def __init__(
        self,
        client: DriveClient,
        executor: CallExecutor,
        workers: int = 16,
        page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        """Initialise the restorer.

        Args:
            client: Authenticated DriveClient.
            executor: CallExecutor shared by every listing and restore call.
            workers: Worker threads in the task pool.
            page_size: Listing page size. Runs always use the Drive maximum;
                smaller sizes exist so tests can exercise paging.
        """
        self._client = client
        self._executor = executor
        self._workers = workers
        self._page_size = page_size

    def run(self, folder_ids: Iterable[str] = ()) -> RestoreReport:
        """Traverse the given folders (or the whole store) and wait for completion.

        Each run starts with a fresh visited registry; a folder given twice,
        or reachable from several roots, is listed once.

        Args:
            folder_ids: Root folder ids; empty means the whole store.

        Returns:
            RestoreReport with the counts accumulated by this run.

        Raises:
            ValueError: If a folder id is blank.
        """
        roots = _root_scopes(folder_ids)
        logger.info("[run] starting restore; root_count:%d", len(roots))

        retries_before = self._executor.retries.value
        with TaskGroup(max_workers=self._workers) as tasks:
            dispatcher = RestoreDispatcher(self._client, self._executor, tasks)
            fetcher = PageFetcher(self._client, self._executor, page_size=self._page_size)
            engine = TraversalEngine(fetcher, dispatcher, tasks, registry=VisitedRegistry())
            for root in roots:
                engine.schedule(root)
            tasks.wait()

        report = RestoreReport(
            folders_processed=engine.folders_processed.value,
            items_restored=dispatcher.restored.value,
            restore_failures=dispatcher.failed.value,
            listing_failures=engine.listing_failures.value,
            retries=self._executor.retries.value - retries_before,
        )
        logger.info(
            "[run] restore complete; folders_processed:%d;items_restored:%d;"
            "restore_failures:%d;listing_failures:%d",
            report.folders_processed,
            report.items_restored,
            report.restore_failures,
            report.listing_failures,
        )
        return report


def _root_scopes(folder_ids: Iterable[str]) -> list[FolderScope]:
    """Turn root folder ids into scopes, first occurrence wins.

    Raises:
        ValueError: If any id is empty or whitespace.
    """
    ids = list(folder_ids)
    blank = [fid for fid in ids if not fid.strip()]
    if blank:
        raise ValueError(f"Folder ids must not be blank; got {len(blank)} blank id(s)")
    if not ids:
        return [STORE_ROOT]
    return [FolderScope(id=fid, name=fid) for fid in dict.fromkeys(ids)]


def trash_restorer_from_config(config: AppConfig, interactive: bool = True) -> TrashRestorer:
    """Construct a TrashRestorer from application configuration.

    Creates a DriveClient and a CallExecutor from the config, then wires
    them into a TrashRestorer.

    Args:
        config: Application configuration instance.
        interactive: Whether the browser OAuth flow may run.

    Returns:
        Configured TrashRestorer instance.

    Raises:
        DriveAuthError: If credentials cannot be obtained.
    """
    client = drive_client_from_config(config, interactive=interactive)
    executor = CallExecutor(
        max_connections=config.max_connections,
        policy=RetryPolicy(max_attempts=config.max_attempts),
    )
    return TrashRestorer(
        client=client,
        executor=executor,
        workers=config.workers,
    )
