"""Cargo.toml reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying Cargo.toml.
A version bump must change exactly one line so the release commit stays
readable and diff-friendly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit

from .shell import fatal


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a Cargo.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text())


def save_manifest(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def _version_table(doc: tomlkit.TOMLDocument) -> Any | None:
    """Return the table that owns the crate version.

    [package].version wins; virtual workspaces keep it in
    [workspace.package].version instead.
    """
    package = doc.get("package")
    if package is not None and "version" in package:
        # `version.workspace = true` means the real value lives in the workspace
        if not isinstance(package["version"], dict):
            return package
    workspace_package = doc.get("workspace", {}).get("package")
    if workspace_package is not None and "version" in workspace_package:
        return workspace_package
    return None


def get_package_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the crate name from [package].name.

    Args:
        doc: Parsed Cargo.toml document.
        fallback: Value to return if name is not specified.
    """
    return str(doc.get("package", {}).get("name", fallback))


def get_package_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract the crate version, defaulting to '0.0.0'."""
    table = _version_table(doc)
    if table is None:
        return "0.0.0"
    return str(table["version"])


def set_package_version(doc: tomlkit.TOMLDocument, version: str) -> None:
    """Set the crate version to exactly `version`.

    Raises:
        SystemExit: If the manifest has no version field to update.
    """
    table = _version_table(doc)
    if table is None:
        fatal("No [package].version or [workspace.package].version in Cargo.toml")
    table["version"] = version


def get_tool_config(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract the [package.metadata.dualhost] table as a plain dict.

    Returns an empty dict when the crate carries no dualhost settings.
    """
    table = doc.get("package", {}).get("metadata", {}).get("dualhost")
    if table is None:
        return {}
    return table.unwrap()
