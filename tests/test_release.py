"""Tests for dualhost.release."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from dualhost.config import DualHostConfig
from dualhost.models import VersionBump
from dualhost.release import (
    push_all_tags,
    push_branch,
    push_release,
    push_release_all,
    release,
    resolve_remotes,
    sync_mirror,
)


class TestResolveRemotes:
    @pytest.mark.parametrize(
        "target,expected",
        [
            ("github", ["origin"]),
            ("gitea", ["gitea"]),
            ("all", ["origin", "gitea"]),
        ],
    )
    def test_defaults(self, target: str, expected: list[str]) -> None:
        assert resolve_remotes(target, DualHostConfig()) == expected

    def test_custom_names(self) -> None:
        config = DualHostConfig(primary_remote="hub", mirror_remote="forgejo")
        assert resolve_remotes("all", config) == ["hub", "forgejo"]

    def test_unknown_target(self) -> None:
        with pytest.raises(ValueError):
            resolve_remotes("gitlab", DualHostConfig())


class TestRelease:
    @patch("dualhost.release.push")
    @patch("dualhost.release.bump_version")
    def test_branches_before_tags(
        self, mock_bump: MagicMock, mock_push: MagicMock
    ) -> None:
        mock_bump.return_value = VersionBump(old="0.1.5", new="0.2.0")

        bump = release("0.2.0", "all", DualHostConfig(), assume_yes=True)

        assert bump is not None and bump.tag == "v0.2.0"
        assert mock_push.call_args_list == [
            call("origin", "main"),
            call("gitea", "main"),
            call("origin", "v0.2.0"),
            call("gitea", "v0.2.0"),
        ]

    @patch("dualhost.release.push")
    @patch("dualhost.release.bump_version")
    def test_single_remote(self, mock_bump: MagicMock, mock_push: MagicMock) -> None:
        mock_bump.return_value = VersionBump(old="0.1.5", new="0.1.6")

        release("0.1.6", "gitea", DualHostConfig())

        assert mock_push.call_args_list == [
            call("gitea", "main"),
            call("gitea", "v0.1.6"),
        ]

    @patch("dualhost.release.push")
    @patch("dualhost.release.bump_version", return_value=None)
    def test_aborted_bump_pushes_nothing(
        self, mock_bump: MagicMock, mock_push: MagicMock
    ) -> None:
        assert release("0.2.0", "all", DualHostConfig()) is None
        mock_push.assert_not_called()

    @patch("dualhost.release.push")
    @patch("dualhost.release.bump_version")
    def test_first_failed_push_halts(
        self, mock_bump: MagicMock, mock_push: MagicMock
    ) -> None:
        mock_bump.return_value = VersionBump(old="0.1.5", new="0.2.0")
        mock_push.side_effect = [None, SystemExit(1)]

        with pytest.raises(SystemExit):
            release("0.2.0", "all", DualHostConfig())

        assert mock_push.call_count == 2

    @patch("dualhost.release.push")
    @patch("dualhost.release.bump_version")
    def test_forwards_bump_options(
        self, mock_bump: MagicMock, mock_push: MagicMock
    ) -> None:
        mock_bump.return_value = VersionBump(old="0.1.5", new="0.2.0")
        config = DualHostConfig()

        release("0.2.0", "github", config, assume_yes=True, skip_checks=True)

        mock_bump.assert_called_once_with(
            "0.2.0", root=None, config=config, assume_yes=True, skip_checks=True
        )


@patch("dualhost.release.push")
def test_push_branch_to_all(mock_push: MagicMock) -> None:
    push_branch("all", DualHostConfig(branch="trunk"))
    assert mock_push.call_args_list == [call("origin", "trunk"), call("gitea", "trunk")]


@patch("dualhost.release.push_tags")
def test_push_all_tags_to_github(mock_push_tags: MagicMock) -> None:
    push_all_tags("github", DualHostConfig())
    mock_push_tags.assert_called_once_with("origin")


@patch("dualhost.release.push_tags")
@patch("dualhost.release.push")
def test_push_release_all(mock_push: MagicMock, mock_push_tags: MagicMock) -> None:
    push_release_all(DualHostConfig())

    assert mock_push.call_args_list == [call("origin", "main"), call("gitea", "main")]
    assert mock_push_tags.call_args_list == [call("origin"), call("gitea")]


@patch("dualhost.release.push_tags")
@patch("dualhost.release.push")
def test_sync_mirror_forces(mock_push: MagicMock, mock_push_tags: MagicMock) -> None:
    sync_mirror(DualHostConfig())

    mock_push.assert_called_once_with("gitea", "main", force=True)
    mock_push_tags.assert_called_once_with("gitea", force=True)


class TestPushRelease:
    @patch("dualhost.release.push")
    def test_pushes_current_version_tag(
        self, mock_push: MagicMock, crate: Path
    ) -> None:
        tag = push_release("all", DualHostConfig(branch="trunk"), root=crate)

        assert tag == "v0.1.5"
        assert mock_push.call_args_list == [
            call("origin", "trunk"),
            call("gitea", "trunk"),
            call("origin", "v0.1.5"),
            call("gitea", "v0.1.5"),
        ]

    @patch("dualhost.release.push")
    def test_custom_mirror(self, mock_push: MagicMock, crate: Path) -> None:
        push_release("gitea", DualHostConfig(mirror_remote="forgejo"), root=crate)

        assert mock_push.call_args_list == [
            call("forgejo", "main"),
            call("forgejo", "v0.1.5"),
        ]

    @patch("dualhost.release.push")
    def test_missing_manifest(self, mock_push: MagicMock, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            push_release("github", DualHostConfig(), root=tmp_path)
        mock_push.assert_not_called()
