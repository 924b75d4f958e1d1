"""Publish readiness checks and crates.io publishing."""

from __future__ import annotations

from pathlib import Path

import click

from .config import DualHostConfig
from .models import CheckResult
from .shell import fatal, run, step

PUBLISH_CHECKS: list[tuple[str, tuple[str, ...]]] = [
    ("Checking code formatting", ("cargo", "fmt", "--", "--check")),
    ("Checking clippy", ("cargo", "clippy", "--lib", "--", "-D", "warnings")),
    ("Running tests", ("cargo", "test", "--all-features")),
    ("Building documentation", ("cargo", "doc", "--no-deps")),
    ("Building examples", ("cargo", "build", "--examples")),
]


def _mark(passed: bool) -> str:
    return click.style("✓", fg="green") if passed else click.style("✗", fg="red")


def check_required_files(root: Path, required: list[str]) -> CheckResult:
    missing = [f for f in required if not (root / f).is_file()]
    detail = ", ".join(missing)
    return CheckResult(
        name="Checking required files", passed=not missing, detail=detail
    )


def check_publish(root: Path, config: DualHostConfig) -> list[CheckResult]:
    """Run every publish check, without stopping at the first failure.

    Command output is discarded; only pass/fail is reported, one line
    per check, followed by the missing required files if any.

    Returns:
        One CheckResult per check, in the order they ran.
    """
    step(f"Checking {root.name} for publish readiness")

    results: list[CheckResult] = []
    for label, args in PUBLISH_CHECKS:
        click.echo(f"{label}... ", nl=False)
        passed = run(*args, check=False, cwd=root, quiet=True).returncode == 0
        click.echo(_mark(passed))
        results.append(CheckResult(name=label, passed=passed))

    click.echo("Checking required files... ", nl=False)
    files = check_required_files(root, config.required_files)
    click.echo(_mark(files.passed))
    if not files.passed:
        click.secho(f"  Missing: {files.detail}", fg="red")
    results.append(files)

    failed = sum(1 for r in results if not r.passed)
    click.echo()
    if failed:
        click.secho(
            f"✗ {failed} check(s) failed. Please fix before publishing.", fg="red"
        )
    else:
        click.secho("✓ All checks passed! Ready to publish.", fg="green")
    return results


def publish(root: Path, dry_run: bool = False) -> None:
    """Run `cargo publish`, optionally as a dry run."""
    args = ["cargo", "publish"] + (["--dry-run"] if dry_run else [])
    if run(*args, check=False, cwd=root).returncode != 0:
        fatal("cargo publish failed")
