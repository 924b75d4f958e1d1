"""Tests for dualhost.publish."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dualhost.config import DualHostConfig
from dualhost.publish import (
    PUBLISH_CHECKS,
    check_publish,
    check_required_files,
    publish,
)


def _result(code: int) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess([], code)


class TestCheckRequiredFiles:
    def test_reports_missing(self, crate: Path) -> None:
        result = check_required_files(crate, ["README.md", "LICENSE", "CHANGELOG.md"])

        assert result.passed is False
        assert result.detail == "LICENSE, CHANGELOG.md"

    def test_all_present(self, crate: Path) -> None:
        assert check_required_files(crate, ["README.md", "Cargo.toml"]).passed


class TestCheckPublish:
    @patch("dualhost.publish.run")
    def test_runs_every_check_despite_failures(
        self, mock_run: MagicMock, crate: Path
    ) -> None:
        """A failing clippy does not stop tests, docs and examples from running."""
        mock_run.side_effect = [_result(c) for c in (0, 1, 0, 0, 0)]

        results = check_publish(crate, DualHostConfig())

        assert mock_run.call_count == len(PUBLISH_CHECKS)
        assert [r.passed for r in results] == [True, False, True, True, True, False]
        assert results[-1].detail == "LICENSE, CHANGELOG.md"

    @patch("dualhost.publish.run")
    def test_output_is_discarded(self, mock_run: MagicMock, crate: Path) -> None:
        mock_run.return_value = _result(0)

        check_publish(crate, DualHostConfig(required_files=["README.md"]))

        for c in mock_run.call_args_list:
            assert c.kwargs["quiet"] is True
            assert c.kwargs["cwd"] == crate

    @patch("dualhost.publish.run")
    def test_all_pass(self, mock_run: MagicMock, crate: Path) -> None:
        mock_run.return_value = _result(0)

        results = check_publish(crate, DualHostConfig(required_files=["Cargo.toml"]))

        assert all(r.passed for r in results)


class TestPublish:
    @patch("dualhost.publish.run")
    def test_dry_run(self, mock_run: MagicMock, crate: Path) -> None:
        mock_run.return_value = _result(0)
        publish(crate, dry_run=True)
        mock_run.assert_called_once_with(
            "cargo", "publish", "--dry-run", check=False, cwd=crate
        )

    @patch("dualhost.publish.run")
    def test_failure_is_fatal(self, mock_run: MagicMock, crate: Path) -> None:
        mock_run.return_value = _result(101)
        with pytest.raises(SystemExit):
            publish(crate)
