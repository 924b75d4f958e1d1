"""Version bump: validate → check → rewrite → changelog → commit → tag.

This module cuts a new crate version locally:
1. Validate the requested version before anything is touched
2. Run the pre-flight checks (fmt, clippy, tests) so a broken tree fails early
3. Rewrite Cargo.toml and the README version badge
4. Refresh Cargo.lock and reformat
5. Regenerate CHANGELOG.md with git-cliff
6. Commit the release files and create an annotated v{version} tag

Nothing is pushed; see release.py for that.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import click

from .changelog import changelog_for_release
from .config import DualHostConfig, load_config
from .models import VersionBump
from .shell import confirm, fatal, git, info, run, step, success, warning
from .toml import (
    get_package_name,
    get_package_version,
    load_manifest,
    save_manifest,
    set_package_version,
)
from .versions import resolve_target, update_badge

PREFLIGHT_CHECKS: list[tuple[str, tuple[str, ...], str]] = [
    (
        "Checking formatting",
        ("cargo", "fmt", "--check"),
        "Code is not formatted. Run: cargo fmt",
    ),
    (
        "Running cargo clippy",
        ("cargo", "clippy", "--all-targets", "--all-features", "--", "-D", "warnings"),
        "Clippy found issues. Please fix them before continuing.",
    ),
    (
        "Running tests",
        ("cargo", "test", "--all-features", "--all-targets"),
        "Tests failed. Please fix them before continuing.",
    ),
]


def current_version(root: Path, config: DualHostConfig) -> str:
    """Read the crate version from the manifest."""
    manifest = root / config.manifest
    if not manifest.exists():
        fatal(f"No {config.manifest} found in {root}")
    return get_package_version(load_manifest(manifest))


def run_preflight_checks(root: Path) -> None:
    """Run fmt-check, clippy and tests, halting on the first failure."""
    for label, args, failure in PREFLIGHT_CHECKS:
        info(f"{label}...")
        if run(*args, check=False, cwd=root).returncode != 0:
            fatal(failure)
    success("All checks passed!")


def update_manifest(manifest: Path, version: str) -> str:
    """Set the crate version in Cargo.toml.

    Returns:
        The crate name, needed to refresh the lockfile.
    """
    doc = load_manifest(manifest)
    set_package_version(doc, version)
    save_manifest(manifest, doc)
    return get_package_name(doc, manifest.parent.name)


def update_readme(readme: Path, version: str) -> bool:
    """Rewrite version badges in the README.

    Returns:
        True if at least one badge was updated.
    """
    if not readme.exists():
        return False
    text, count = update_badge(readme.read_text(), version)
    if count:
        readme.write_text(text)
    return count > 0


def update_lockfile(root: Path, crate: str) -> None:
    """Refresh Cargo.lock for the new version.

    `cargo update -p` fails when the lockfile does not list the crate yet,
    in which case a build regenerates it.
    """
    if run("cargo", "update", "-p", crate, check=False, cwd=root).returncode == 0:
        return
    warning(f"cargo update -p {crate} failed, falling back to cargo build")
    if run("cargo", "build", check=False, cwd=root).returncode != 0:
        fatal("Failed to update Cargo.lock")


def commit_and_tag(root: Path, config: DualHostConfig, bump: VersionBump) -> None:
    """Commit the release files and create the annotated version tag.

    Both steps are skipped with a warning when there is nothing to do
    (no file changes / tag already exists), so re-running a bump is safe.
    A git failure in either step halts the bump.
    """
    candidates = [config.manifest, config.lockfile, config.readme, config.changelog]
    files = [f for f in candidates if (root / f).exists()]

    changed = git("status", "--porcelain", "--", *files, check=False, cwd=root)
    if not changed:
        warning("No changes to commit")
    else:
        try:
            git("add", *files, cwd=root)
            git(
                "commit",
                "-m",
                f"chore: bump version to {bump.new}",
                "-m",
                f"- Update version in {config.manifest} and {config.readme}\n"
                f"- Update {config.lockfile}\n"
                f"- Generate updated {config.changelog}",
                cwd=root,
            )
        except subprocess.CalledProcessError as exc:
            fatal(f"Failed to commit release files: {(exc.stderr or '').strip()}")
        success("Changes committed")

    if git("tag", "--list", bump.tag, check=False, cwd=root):
        warning(f"Tag {bump.tag} already exists")
        return
    try:
        git(
            "tag",
            "-a",
            bump.tag,
            "-m",
            f"Release {bump.tag}\n\nThis release includes all changes documented "
            f"in {config.changelog} for version {bump.new}.",
            cwd=root,
        )
    except subprocess.CalledProcessError as exc:
        fatal(f"Failed to create tag {bump.tag}: {(exc.stderr or '').strip()}")
    success(f"Tag {bump.tag} created")


def bump_version(
    target: str,
    *,
    root: Path | None = None,
    config: DualHostConfig | None = None,
    assume_yes: bool = False,
    skip_checks: bool = False,
) -> VersionBump | None:
    """Cut a new version locally.

    Args:
        target: Explicit version ("0.3.0", "0.3.0-beta.1") or a bump part
                ("major", "minor", "patch").
        root: Crate root. Defaults to the current directory.
        config: Settings; loaded from the crate's Cargo.toml when omitted.
        assume_yes: Skip the confirmation prompt.
        skip_checks: Do not run fmt/clippy/tests first.

    Returns:
        The applied VersionBump, or None if the user aborted.

    Raises:
        SystemExit: On an invalid version or any failing step. An invalid
            version exits before any file is modified.
    """
    root = root or Path.cwd()
    config = config or load_config(root)
    manifest = root / config.manifest

    old = current_version(root, config)
    try:
        new = resolve_target(old, target)
    except ValueError as exc:
        fatal(str(exc))
    bump = VersionBump(old=old, new=new)

    step("Version Bump")
    click.echo(f"Current version: {click.style(old, fg='yellow')}")
    click.echo(f"New version:     {click.style(new, fg='green')}")

    if not confirm("Continue with version bump?", default=False, assume_yes=assume_yes):
        warning("Aborted")
        return None

    step("Step 1/6: Pre-flight checks")
    if skip_checks:
        warning("Skipped (--skip-checks)")
    else:
        run_preflight_checks(root)

    step(f"Step 2/6: Updating {config.manifest} and {config.readme}")
    crate = update_manifest(manifest, new)
    success(f"{config.manifest} updated")
    if update_readme(root / config.readme, new):
        success(f"{config.readme} updated")
    else:
        warning(f"No version badge found in {config.readme}")

    step(f"Step 3/6: Updating {config.lockfile}")
    update_lockfile(root, crate)
    success(f"{config.lockfile} updated")

    step("Step 4/6: Running cargo fmt")
    if run("cargo", "fmt", check=False, cwd=root).returncode != 0:
        fatal("cargo fmt failed")
    success("Code formatted")

    step(f"Step 5/6: Generating {config.changelog}")
    changelog_for_release(new, root / config.changelog)

    step("Step 6/6: Creating git commit and tag")
    commit_and_tag(root, config, bump)

    step("Version bump complete! 🚀")
    info("Next steps:")
    click.echo("  1. Review the changes:  git show")
    click.echo("  2. Push the release:    dualhost push-release-all")
    click.echo(f"     or just one remote:  git push {config.primary_remote} {bump.tag}")
    click.echo("  3. Publish to crates.io: dualhost publish")
    return bump
