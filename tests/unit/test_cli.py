"""Unit tests for __main__.py — argument handling and exit codes."""

import os
from unittest.mock import MagicMock, patch

import pytest

from drive_untrash.__main__ import build_parser, main
from drive_untrash.drive.client import DriveAuthError
from drive_untrash.orchestration.restorer import RestoreReport


def _report() -> RestoreReport:
    return RestoreReport(
        folders_processed=3, items_restored=7, restore_failures=1, listing_failures=0, retries=2
    )


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.folders == []
        assert args.verbose is False
        assert args.aggressive is False
        assert args.max_connections is None

    def test_folder_ids_and_flags(self) -> None:
        args = build_parser().parse_args(["-v", "--aggressive", "--max-connections", "20", "a", "b"])
        assert args.folders == ["a", "b"]
        assert args.verbose is True
        assert args.aggressive is True
        assert args.max_connections == 20

    def test_rejects_non_positive_workers(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--workers", "0"])

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_rejects_blank_folder_id(self, blank: str) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["A", blank])


class TestMain:
    def test_runs_restore_and_prints_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        restorer = MagicMock()
        restorer.run.return_value = _report()

        with (
            patch.dict(os.environ, {}, clear=True),
            patch("drive_untrash.__main__.trash_restorer_from_config", return_value=restorer),
        ):
            code = main(["f1", "f2"])

        assert code == 0
        restorer.run.assert_called_once_with(["f1", "f2"])
        out = capsys.readouterr().out
        assert "folders processed: 3" in out
        assert "items restored: 7" in out

    def test_aggressive_raises_attempt_budget(self) -> None:
        restorer = MagicMock()
        restorer.run.return_value = _report()

        with (
            patch.dict(os.environ, {}, clear=True),
            patch(
                "drive_untrash.__main__.trash_restorer_from_config", return_value=restorer
            ) as mock_factory,
        ):
            main(["--aggressive", "--workers", "2"])

        config = mock_factory.call_args[0][0]
        assert config.max_attempts == 50
        assert config.workers == 2

    def test_missing_credentials_exit_nonzero(self) -> None:
        with (
            patch.dict(os.environ, {}, clear=True),
            patch(
                "drive_untrash.__main__.trash_restorer_from_config",
                side_effect=DriveAuthError("Unable to read client secret file: client_secret.json"),
            ),
        ):
            assert main([]) == 1

    def test_bad_env_config_exit_nonzero(self) -> None:
        with patch.dict(os.environ, {"DU_MAX_ATTEMPTS": "many"}, clear=True):
            assert main([]) == 1
