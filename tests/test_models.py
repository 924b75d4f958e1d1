"""Tests for dualhost.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dualhost.models import CheckResult, MigrationOutcome, Remote, VersionBump


class TestVersionBump:
    def test_create(self) -> None:
        bump = VersionBump(old="1.0.0", new="1.0.1")
        assert bump.old == "1.0.0"
        assert bump.new == "1.0.1"

    def test_tag(self) -> None:
        assert VersionBump(old="0.1.0", new="0.2.0-beta.1").tag == "v0.2.0-beta.1"


class TestRemote:
    def test_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            Remote(name="gitea", url="x", kind="ftp")


class TestCheckResult:
    def test_detail_defaults_empty(self) -> None:
        assert CheckResult(name="Running tests", passed=True).detail == ""


class TestMigrationOutcome:
    def test_rejects_unknown_status(self) -> None:
        with pytest.raises(ValidationError):
            MigrationOutcome(project="a", status="maybe")
