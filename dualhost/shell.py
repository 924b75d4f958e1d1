"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running git, cargo and
the other tools a release touches, plus the coloured status helpers every
command prints through.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import click


def capture(*args: str, check: bool = True, cwd: Path | None = None) -> str:
    """Run a command and return its stripped stdout."""
    result = subprocess.run(args, capture_output=True, text=True, check=check, cwd=cwd)
    return result.stdout.strip()


def git(*args: str, check: bool = True, cwd: Path | None = None) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "remote", "-v").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).
        cwd: Directory to run in. Defaults to the current directory.

    Returns:
        Stripped stdout from the git command.
    """
    return capture("git", *args, check=check, cwd=cwd)


def run(
    *args: str,
    check: bool = True,
    cwd: Path | None = None,
    quiet: bool = False,
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary command.

    Unlike git(), this doesn't capture output - it streams directly to
    the terminal so users can see cargo and vhs progress. With quiet=True
    the output is discarded and only the return code matters.

    Args:
        *args: Command and arguments (e.g., "cargo", "test").
        check: If True (default), raise on non-zero exit.
        cwd: Directory to run in.
        quiet: Discard stdout and stderr.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    sink = subprocess.DEVNULL if quiet else None
    return subprocess.run(args, check=check, cwd=cwd, stdout=sink, stderr=sink)


def probe(
    *args: str, timeout: float | None = None, cwd: Path | None = None
) -> subprocess.CompletedProcess[str]:
    """Run a command for its status and combined output, never raising.

    A missing binary or a timeout is reported as returncode 127 / 124
    so callers can treat every probe failure the same way.
    """
    try:
        return subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except FileNotFoundError:
        return subprocess.CompletedProcess(args, 127, stdout="")
    except subprocess.TimeoutExpired:
        return subprocess.CompletedProcess(args, 124, stdout="")


def command_exists(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None


def confirm(question: str, default: bool = False, assume_yes: bool = False) -> bool:
    """Ask a yes/no question. assume_yes answers it without prompting."""
    if assume_yes:
        return True
    return click.confirm(question, default=default)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of a bump, release or migration in
    terminal output.
    """
    rule = click.style("━" * 52, fg="cyan")
    click.echo(f"\n{rule}\n{click.style('  ' + msg, fg='cyan')}\n{rule}")


def success(msg: str) -> None:
    click.secho(f"✅ {msg}", fg="green")


def info(msg: str) -> None:
    click.secho(f"ℹ️  {msg}", fg="blue")


def warning(msg: str) -> None:
    click.secho(f"⚠️  {msg}", fg="yellow")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the current operation.
    """
    click.secho(f"❌ Error: {msg}", fg="red", err=True)
    raise SystemExit(1)
