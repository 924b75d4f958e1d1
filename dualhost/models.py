"""Data models for dualhost.

These Pydantic models represent the records passed between the release,
hosting and demo-generation steps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel


class VersionBump(BaseModel):
    """Records a version change for the crate.

    Attributes:
        old: The version before bumping.
        new: The version after bumping.
    """

    old: str
    new: str

    @property
    def tag(self) -> str:
        """Git tag created for the new version."""
        return f"v{self.new}"


class Remote(BaseModel):
    """A configured git remote.

    Attributes:
        name: Remote name (e.g., "origin", "gitea").
        url: Fetch URL.
        kind: "ssh" for git@host:path and ssh:// URLs, "https" otherwise.
    """

    name: str
    url: str
    kind: Literal["ssh", "https"]


class CheckResult(BaseModel):
    """Outcome of a single publish-readiness check."""

    name: str
    passed: bool
    detail: str = ""


class TapeResult(BaseModel):
    """Outcome of recording one VHS tape."""

    name: str
    path: Path
    ok: bool


class MigrationOutcome(BaseModel):
    """Result of migrating one project to dual hosting.

    Attributes:
        project: Project directory name.
        status: What happened to it.
        detail: Reason for a skip or failure, empty on success.
    """

    project: str
    status: Literal["succeeded", "failed", "skipped"]
    detail: str = ""
