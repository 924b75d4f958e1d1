"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

CARGO_TOML = """\
[package]
name = "tui-slider"
version = "0.1.5"  # bumped by dualhost
edition = "2021"
license = "MIT"

[dependencies]
ratatui = "0.29"
"""

README = """\
# tui-slider

![Version](https://img.shields.io/badge/version-0.1.5-blue)

A slider widget for ratatui.
"""


@pytest.fixture
def crate(tmp_path: Path) -> Path:
    """Create a minimal crate with Cargo.toml and a README badge."""
    root = tmp_path / "tui-slider"
    root.mkdir()
    (root / "Cargo.toml").write_text(CARGO_TOML)
    (root / "README.md").write_text(README)
    return root.resolve()


@pytest.fixture
def sample_manifest() -> tomlkit.TOMLDocument:
    """Create a sample Cargo.toml document."""
    return tomlkit.parse(CARGO_TOML)


@pytest.fixture
def workspace_manifest() -> tomlkit.TOMLDocument:
    """A virtual workspace that keeps the version in [workspace.package]."""
    content = """\
[workspace]
members = ["crates/*"]

[workspace.package]
version = "2.3.4"
"""
    return tomlkit.parse(content)


@pytest.fixture
def git_project(tmp_path: Path) -> Path:
    """A project directory that looks like a git repository."""
    root = tmp_path / "Projects" / "tui-piechart"
    (root / ".git").mkdir(parents=True)
    return root.resolve()
