"""Integration tests for Google Drive API connectivity.

These tests require a cached OAuth token and are skipped in CI/CD unless
the DU_INTEGRATION environment variable is set. DU_INTEGRATION_FOLDER may
name a folder to walk; otherwise the whole drive is walked.
"""

import os

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("DU_INTEGRATION"),
    reason="Real Drive credentials not available",
)


def test_restore_run_real() -> None:
    """Connect to the real Drive API and run a full restore.

    Asserts that the run completes and reports at least the root folder,
    without raising an exception.
    """
    from drive_untrash.config import load_config
    from drive_untrash.orchestration.restorer import trash_restorer_from_config

    config = load_config()
    restorer = trash_restorer_from_config(config, interactive=False)
    folder = os.getenv("DU_INTEGRATION_FOLDER")
    report = restorer.run([folder] if folder else [])

    assert report.folders_processed + report.listing_failures >= 1
