"""Changelog generation via git-cliff.

git-cliff reads conventional commits and renders CHANGELOG.md using the
project's cliff.toml; this module only picks the right invocation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from .shell import command_exists, fatal, info, run, success, warning

ChangelogMode = Literal["full", "unreleased", "tag", "latest"]

INSTALL_HINT = "Install with: cargo install git-cliff"


def ensure_git_cliff() -> None:
    """Halt when git-cliff is not installed."""
    if not command_exists("git-cliff"):
        fatal(f"git-cliff not found. {INSTALL_HINT}")


def cliff_args(mode: ChangelogMode, output: Path, tag: str | None = None) -> list[str]:
    """Build git-cliff arguments for a changelog mode.

    - full: regenerate from all tags
    - unreleased: prepend only commits since the last tag
    - tag: regenerate, treating HEAD as release `tag`
    - latest: only the latest tag's section
    """
    if mode == "full":
        return ["-o", str(output)]
    if mode == "unreleased":
        return ["--unreleased", "--prepend", str(output)]
    if mode == "tag":
        if not tag:
            raise ValueError("mode 'tag' requires a tag")
        return ["--tag", tag, "-o", str(output)]
    if mode == "latest":
        return ["--latest", "-o", str(output)]
    raise ValueError(f"Unknown changelog mode: {mode}")


def generate(mode: ChangelogMode, output: Path, tag: str | None = None) -> None:
    """Write the changelog to `output`."""
    ensure_git_cliff()
    args = cliff_args(mode, output, tag)
    info(f"Generating {mode} changelog...")
    if run("git-cliff", *args, check=False).returncode != 0:
        fatal("git-cliff failed")
    success(f"Changelog written to {output}")


def preview(unreleased: bool = False) -> None:
    """Print the changelog to stdout without touching any file."""
    ensure_git_cliff()
    args = ["--unreleased"] if unreleased else []
    if run("git-cliff", *args, check=False).returncode != 0:
        fatal("git-cliff failed")


def changelog_for_release(version: str, output: Path) -> bool:
    """Regenerate the changelog with HEAD as v{version}.

    A missing git-cliff is not fatal here: the bump continues without a
    changelog update.

    Returns:
        True if the changelog was regenerated.
    """
    if not command_exists("git-cliff"):
        warning("git-cliff not found. Skipping changelog generation.")
        warning(INSTALL_HINT)
        return False
    args = cliff_args("tag", output, f"v{version}")
    if run("git-cliff", *args, check=False, cwd=output.parent).returncode != 0:
        fatal("git-cliff failed")
    success("Changelog generated")
    return True
