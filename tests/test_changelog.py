"""Tests for dualhost.changelog."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dualhost.changelog import changelog_for_release, cliff_args, generate


class TestCliffArgs:
    def test_full(self) -> None:
        assert cliff_args("full", Path("CHANGELOG.md")) == ["-o", "CHANGELOG.md"]

    def test_unreleased_prepends(self) -> None:
        assert cliff_args("unreleased", Path("CHANGELOG.md")) == [
            "--unreleased",
            "--prepend",
            "CHANGELOG.md",
        ]

    def test_tag(self) -> None:
        assert cliff_args("tag", Path("CHANGELOG.md"), "v0.2.0") == [
            "--tag",
            "v0.2.0",
            "-o",
            "CHANGELOG.md",
        ]

    def test_tag_requires_tag(self) -> None:
        with pytest.raises(ValueError):
            cliff_args("tag", Path("CHANGELOG.md"))


@patch("dualhost.changelog.command_exists", return_value=False)
def test_generate_requires_git_cliff(mock_exists: MagicMock) -> None:
    with pytest.raises(SystemExit) as excinfo:
        generate("full", Path("CHANGELOG.md"))
    assert excinfo.value.code == 1


@patch("dualhost.changelog.run")
@patch("dualhost.changelog.command_exists", return_value=True)
def test_generate_latest(mock_exists: MagicMock, mock_run: MagicMock) -> None:
    mock_run.return_value = subprocess.CompletedProcess([], 0)

    generate("latest", Path("CHANGELOG.md"))

    mock_run.assert_called_once_with(
        "git-cliff", "--latest", "-o", "CHANGELOG.md", check=False
    )


@patch("dualhost.changelog.run")
@patch("dualhost.changelog.command_exists", return_value=False)
def test_release_changelog_skipped_without_git_cliff(
    mock_exists: MagicMock, mock_run: MagicMock
) -> None:
    assert changelog_for_release("0.2.0", Path("CHANGELOG.md")) is False
    mock_run.assert_not_called()


@patch("dualhost.changelog.run")
@patch("dualhost.changelog.command_exists", return_value=True)
def test_release_changelog_tags_head(
    mock_exists: MagicMock, mock_run: MagicMock, tmp_path: Path
) -> None:
    mock_run.return_value = subprocess.CompletedProcess([], 0)
    output = tmp_path / "CHANGELOG.md"

    assert changelog_for_release("0.2.0", output) is True
    mock_run.assert_called_once_with(
        "git-cliff", "--tag", "v0.2.0", "-o", str(output), check=False, cwd=tmp_path
    )
