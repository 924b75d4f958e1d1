"""Installing the external tools a release needs, and `just` setup.

dualhost shells out to just, git-cliff, vhs and cargo-watch rather than
reimplementing them; this module gets them onto PATH and wires up the
project's justfile and shell completion.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import click

from .justfile import add_missing_recipes, list_recipes, missing_recipes, render_full
from .shell import (
    capture,
    command_exists,
    confirm,
    fatal,
    info,
    run,
    step,
    success,
    warning,
)

# Package-manager fallbacks for just when cargo is unavailable, in order
JUST_INSTALLERS: list[tuple[str, tuple[str, ...]]] = [
    ("apt-get", ("sudo", "apt-get", "install", "-y", "just")),
    ("brew", ("brew", "install", "just")),
    ("pacman", ("sudo", "pacman", "-S", "--noconfirm", "just")),
    ("dnf", ("sudo", "dnf", "install", "-y", "just")),
]

# tool → (marker in justfile, install command)
OPTIONAL_TOOLS: dict[str, tuple[str, tuple[str, ...]]] = {
    "git-cliff": ("changelog", ("cargo", "install", "git-cliff")),
    "vhs": ("vhs", ("brew", "install", "vhs")),
    "cargo-watch": ("cargo watch", ("cargo", "install", "cargo-watch")),
}

COMPLETION_SHELLS = ("bash", "zsh", "fish")


def cargo_install(tool: str) -> None:
    if run("cargo", "install", tool, check=False).returncode != 0:
        fatal(f"cargo install {tool} failed")


def install_tools() -> None:
    """Install just and git-cliff through cargo when missing."""
    step("Installing required tools")
    for tool in ("just", "git-cliff"):
        if command_exists(tool):
            success(f"{tool} already installed")
            continue
        if not command_exists("cargo"):
            fatal(f"{tool} is missing and cargo is not available to install it")
        cargo_install(tool)
        success(f"{tool} installed")
    success("All tools installed!")


def install_just() -> None:
    """Install just with cargo, or the first available system package manager."""
    if command_exists("cargo"):
        info("Installing just via cargo...")
        cargo_install("just")
        return
    for manager, args in JUST_INSTALLERS:
        if command_exists(manager):
            warning(f"cargo not found. Attempting to install via {manager}...")
            if run(*args, check=False).returncode != 0:
                fatal(f"Installing just via {manager} failed")
            return
    fatal(
        "Could not find cargo or a supported package manager.\n"
        "Install Rust from https://rustup.rs/ then run: cargo install just"
    )


def optional_tools(justfile_text: str) -> list[str]:
    """Tools the justfile uses that are not installed."""
    return [
        tool
        for tool, (marker, _) in OPTIONAL_TOOLS.items()
        if marker in justfile_text and not command_exists(tool)
    ]


def completion_path(shell: str, home: Path | None = None) -> Path:
    home = home or Path.home()
    paths = {
        "bash": home / ".local/share/bash-completion/completions/just",
        "zsh": home / ".zsh/completion/_just",
        "fish": home / ".config/fish/completions/just.fish",
    }
    if shell not in paths:
        raise ValueError(f"Unsupported shell: {shell}")
    return paths[shell]


def install_completion(
    shell: str, home: Path | None = None, assume_yes: bool = False
) -> Path:
    """Write `just --completions <shell>` to the shell's completion dir.

    For zsh, also offers to add the completion dir to fpath in ~/.zshrc.
    """
    dest = completion_path(shell, home)
    try:
        script = capture("just", "--completions", shell)
    except subprocess.CalledProcessError:
        fatal(f"just --completions {shell} failed")
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(script + "\n")
    success(f"{shell} completion installed to {dest}")

    if shell == "zsh":
        zshrc = (home or Path.home()) / ".zshrc"
        current = zshrc.read_text() if zshrc.exists() else ""
        if "fpath=(~/.zsh/completion" not in current and confirm(
            "Add completion directory to ~/.zshrc?", default=True, assume_yes=assume_yes
        ):
            with open(zshrc, "a") as fh:
                fh.write("\n# just completion\nfpath=(~/.zsh/completion $fpath)\n")
            success("Updated ~/.zshrc")
    return dest


def _show_quick_start(recipes: list[str]) -> None:
    groups = [
        ("Build", ("build", "build-release")),
        ("Test", ("test", "check-all")),
        ("Git", ("push-all", "sync-gitea")),
        ("Release", ("bump", "release-all")),
    ]
    info("Quick start:")
    for label, names in groups:
        present = [n for n in names if n in recipes]
        if present:
            click.echo(f"  {label}: " + ", ".join(f"just {n}" for n in present))


def setup_just(
    root: Path | None = None,
    *,
    shell: str | None = None,
    assume_yes: bool = False,
    home: Path | None = None,
) -> None:
    """Interactive `just` setup for the project in root.

    1. Create a justfile, or add missing common recipes to an existing one
    2. Install just if needed
    3. Offer to install optional tools the justfile references
    4. Offer shell completion for `shell`
    """
    root = root or Path.cwd()
    path = root / "justfile"

    step("Just Command Runner Setup")
    info(f"Project: {root.name}")

    if path.exists():
        success("Found existing justfile")
        wanted = missing_recipes(path.read_text())
        if wanted and confirm(
            f"Add missing commands ({', '.join(wanted)}) to your justfile?",
            default=True,
            assume_yes=assume_yes,
        ):
            added = add_missing_recipes(path)
            success(f"Added {len(added)} recipes (backup: justfile.backup)")
    else:
        warning("No justfile found in current directory")
        if confirm(
            "Create a new justfile with common commands?",
            default=True,
            assume_yes=assume_yes,
        ):
            path.write_text(render_full(root.name))
            success("Created justfile")

    if command_exists("just"):
        success("just is already installed")
    else:
        install_just()
        if not command_exists("just"):
            fatal("just installation could not be verified")
        success("just installed")

    text = path.read_text() if path.exists() else ""
    for tool in optional_tools(text):
        _, args = OPTIONAL_TOOLS[tool]
        warning(f"{tool} is used by your justfile but not installed")
        if confirm(f"Install {tool}?", default=True, assume_yes=assume_yes):
            if run(*args, check=False).returncode == 0:
                success(f"{tool} installed")
            else:
                warning(f"Install it later with: {' '.join(args)}")

    if shell and shell in COMPLETION_SHELLS:
        question = f"Set up {shell} completion now?"
        if confirm(question, default=False, assume_yes=assume_yes):
            install_completion(shell, home=home, assume_yes=assume_yes)
    else:
        info("Shell completion: just --completions <bash|zsh|fish> > <completion-file>")

    _show_quick_start(list_recipes(text))
    success("Setup complete! Run 'just --list' to see all commands.")
