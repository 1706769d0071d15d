"""Smoke tests — validate the function app endpoints end-to-end."""

import json
from unittest.mock import MagicMock, patch

import azure.functions as func

from drive_untrash.orchestration.restorer import RestoreReport


def _request(body: bytes = b"") -> func.HttpRequest:
    return func.HttpRequest(method="POST", url="/api/restore", body=body)


def test_health_check_returns_status() -> None:
    """Health endpoint returns ok status with version from the package."""
    from drive_untrash.functions.http_trigger import health_check

    response = health_check(MagicMock(spec=func.HttpRequest))

    assert response.status_code == 200
    body = json.loads(response.get_body())
    assert body["status"] == "ok"
    assert body["version"] == "0.1.0"


def test_restore_trigger_returns_report() -> None:
    """Restore endpoint runs a non-interactive restore for the requested folders."""
    from drive_untrash.functions.http_trigger import restore_trigger

    mock_restorer = MagicMock()
    mock_restorer.run.return_value = RestoreReport(2, 5, 0, 0, 1)

    with (
        patch("drive_untrash.functions.http_trigger.load_config"),
        patch(
            "drive_untrash.functions.http_trigger.trash_restorer_from_config",
            return_value=mock_restorer,
        ) as mock_factory,
    ):
        response = restore_trigger(_request(json.dumps({"folders": ["a", "b"]}).encode()))

    assert response.status_code == 200
    assert mock_factory.call_args.kwargs["interactive"] is False
    mock_restorer.run.assert_called_once_with(["a", "b"])
    body = json.loads(response.get_body())
    assert body["status"] == "ok"
    assert body["items_restored"] == 5


def test_restore_trigger_requires_folders() -> None:
    """Whole-drive walks are not run inside a request."""
    from drive_untrash.functions.http_trigger import restore_trigger

    with patch("drive_untrash.functions.http_trigger.trash_restorer_from_config") as mock_factory:
        no_body = restore_trigger(_request())
        no_folders = restore_trigger(_request(json.dumps({"folders": []}).encode()))

    assert no_body.status_code == 400
    assert no_folders.status_code == 400
    mock_factory.assert_not_called()


def test_restore_trigger_rejects_blank_folder_ids() -> None:
    from drive_untrash.functions.http_trigger import restore_trigger

    with patch("drive_untrash.functions.http_trigger.trash_restorer_from_config") as mock_factory:
        response = restore_trigger(_request(json.dumps({"folders": ["", " "]}).encode()))

    assert response.status_code == 400
    assert "non-blank" in json.loads(response.get_body())["message"]
    mock_factory.assert_not_called()


def test_restore_trigger_rejects_bad_folders() -> None:
    from drive_untrash.functions.http_trigger import restore_trigger

    response = restore_trigger(_request(json.dumps({"folders": "abc"}).encode()))

    assert response.status_code == 400


def test_restore_trigger_returns_500_on_failure() -> None:
    from drive_untrash.functions.http_trigger import restore_trigger

    with (
        patch("drive_untrash.functions.http_trigger.load_config"),
        patch(
            "drive_untrash.functions.http_trigger.trash_restorer_from_config",
            side_effect=RuntimeError("no token"),
        ),
    ):
        response = restore_trigger(_request(json.dumps({"folders": ["a"]}).encode()))

    assert response.status_code == 500
    assert json.loads(response.get_body())["message"] == "Internal server error"
