"""Git remote management for dual GitHub + Gitea hosting.

Everything here goes through the git and ssh CLIs. Required operations
(adding a remote, pushing a release) halt on failure; connectivity probes
only warn, since a mirror repository that does not exist yet is a normal
state right after setup.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path

import click

from .config import DualHostConfig
from .models import Remote
from .shell import (
    command_exists,
    confirm,
    fatal,
    git,
    info,
    probe,
    run,
    step,
    success,
    warning,
)

SSH_KEY_NAMES = ("id_rsa", "id_ed25519", "id_ecdsa")
SSH_OK_MARKERS = ("successfully authenticated", "Hi there")

_SCP_LIKE = re.compile(r"^[\w.-]+@([^:/]+):")
_SSH_URL = re.compile(r"^ssh://(?:[\w.-]+@)?([^:/]+)")


def parse_ssh_host(url: str) -> str | None:
    """Extract the host from an SSH remote URL.

    Examples:
        "git@gitea.example.com:me/crate.git" → "gitea.example.com"
        "ssh://git@gitea.example.com:2222/me/crate.git" → "gitea.example.com"
        "https://gitea.example.com/me/crate.git" → None
    """
    for pattern in (_SCP_LIKE, _SSH_URL):
        m = pattern.match(url)
        if m:
            return m.group(1)
    return None


def list_remotes(cwd: Path | None = None) -> list[Remote]:
    """Parse `git remote -v` into one Remote per name (fetch URLs)."""
    remotes: list[Remote] = []
    for line in git("remote", "-v", check=False, cwd=cwd).splitlines():
        parts = line.split()
        if len(parts) < 2 or (len(parts) > 2 and parts[2] != "(fetch)"):
            continue
        name, url = parts[0], parts[1]
        kind = "ssh" if parse_ssh_host(url) else "https"
        remotes.append(Remote(name=name, url=url, kind=kind))
    return remotes


def has_remote(name: str, cwd: Path | None = None) -> bool:
    return name in git("remote", check=False, cwd=cwd).splitlines()


def add_or_update_remote(name: str, url: str, cwd: Path | None = None) -> str:
    """Point remote `name` at `url`, adding it if needed.

    Returns:
        "updated" if the remote already existed, "added" otherwise.

    Raises:
        SystemExit: If git refuses the change (e.g. not a repository).
    """
    existed = has_remote(name, cwd=cwd)
    action = "set-url" if existed else "add"
    try:
        git("remote", action, name, url, cwd=cwd)
    except subprocess.CalledProcessError as exc:
        fatal(f"Failed to configure remote {name}: {(exc.stderr or '').strip()}")
    return "updated" if existed else "added"


def show_remotes(names: list[str], cwd: Path | None = None) -> None:
    """Print the configured remotes, restricted to `names`."""
    info("Configured remotes:")
    for line in git("remote", "-v", check=False, cwd=cwd).splitlines():
        if line.split("\t", 1)[0] in names:
            click.echo(f"  {line}")


def find_ssh_keys(home: Path | None = None) -> list[Path]:
    """Return the default private keys that exist under ~/.ssh."""
    ssh_dir = (home or Path.home()) / ".ssh"
    return [ssh_dir / n for n in SSH_KEY_NAMES if (ssh_dir / n).is_file()]


def ssh_reachable(host: str, timeout: int = 5) -> bool:
    """Try `ssh -T git@host` and look for a greeting.

    Git hosts close the session with a non-zero code even when
    authentication works, so only the greeting text counts.
    """
    result = probe(
        "ssh", "-o", f"ConnectTimeout={timeout}", "-T", f"git@{host}",
        timeout=timeout + 10,
    )
    return any(marker in result.stdout for marker in SSH_OK_MARKERS)


def remote_reachable(name: str, cwd: Path | None = None) -> bool:
    """Check that `git ls-remote <name>` can talk to the remote."""
    return probe("git", "ls-remote", name, timeout=60, cwd=cwd).returncode == 0


def check_ssh(host: str, assume_yes: bool = False, home: Path | None = None) -> None:
    """Verify SSH keys exist and the host accepts them.

    Missing keys halt unless the user chooses to continue; an unverified
    connection only warns.
    """
    keys = find_ssh_keys(home)
    if not keys:
        warning("No SSH keys found in ~/.ssh/")
        info("Generate SSH key with:")
        click.echo('  ssh-keygen -t ed25519 -C "your_email@example.com"')
        info("Then add the public key to your Gitea instance:")
        click.echo("  Gitea UI → Settings → SSH/GPG Keys → Add Key")
        if not confirm("Continue anyway?", default=False, assume_yes=assume_yes):
            fatal("SSH keys required for SSH URLs. Set up SSH keys first.")
        return

    success("SSH keys found")
    info(f"Testing SSH connection to {host}...")
    if ssh_reachable(host):
        success("SSH connection successful!")
        return

    warning("Could not verify SSH connection")
    info("This is normal if the key is not yet added to Gitea")
    info("To add your SSH key to Gitea:")
    click.echo(f"  1. Copy: cat {keys[0]}.pub")
    click.echo("  2. Gitea UI → Settings → SSH/GPG Keys → Add Key")


def _push(*args: str, what: str, cwd: Path | None = None) -> None:
    result = run("git", "push", *args, check=False, cwd=cwd)
    if result.returncode != 0:
        fatal(f"Failed to push {what}")


def push(remote: str, ref: str, force: bool = False, cwd: Path | None = None) -> None:
    """Push a branch or tag to a remote."""
    args = [remote, ref] + (["--force"] if force else [])
    _push(*args, what=f"{ref} to {remote}", cwd=cwd)


def push_tags(remote: str, force: bool = False, cwd: Path | None = None) -> None:
    """Push all tags to a remote."""
    args = [remote, "--tags"] + (["--force"] if force else [])
    _push(*args, what=f"tags to {remote}", cwd=cwd)


def pull(remote: str, branch: str, cwd: Path | None = None) -> None:
    result = run("git", "pull", remote, branch, check=False, cwd=cwd)
    if result.returncode != 0:
        fatal(f"Failed to pull {branch} from {remote}")


def offer_push(remote: str, assume_yes: bool = False, cwd: Path | None = None) -> None:
    """Offer to push every branch and tag to a freshly added remote.

    Failures only warn: the repository may not exist on the server yet.
    """
    if not confirm(
        f"Do you want to push all branches and tags to {remote} now?",
        default=False,
        assume_yes=assume_yes,
    ):
        return

    info(f"Pushing to {remote}...")
    if run("git", "push", remote, "--all", check=False, cwd=cwd).returncode == 0:
        success(f"All branches pushed to {remote}")
    else:
        warning("Failed to push branches (repository might not exist yet)")
    if run("git", "push", remote, "--tags", check=False, cwd=cwd).returncode == 0:
        success(f"All tags pushed to {remote}")
    else:
        warning("Failed to push tags")


def offer_gitea_actions(root: Path, assume_yes: bool = False) -> bool:
    """Offer to create .gitea/workflows, seeded from .github/workflows.

    Returns:
        True if .gitea exists afterwards.
    """
    gitea_dir = root / ".gitea"
    if gitea_dir.exists():
        success(".gitea directory already exists")
        return True
    if not confirm(
        "Set up Gitea Actions (CI/CD)?", default=False, assume_yes=assume_yes
    ):
        return False

    dest = gitea_dir / "workflows"
    dest.mkdir(parents=True)
    github_workflows = root / ".github" / "workflows"
    if github_workflows.is_dir():
        info("Copying workflows from .github to .gitea...")
        shutil.copytree(github_workflows, dest, dirs_exist_ok=True)
        success("Workflows copied to .gitea/workflows/")
        warning("You may need to adjust these workflows for your Gitea setup")
    else:
        success(".gitea/workflows directory created")
        info("Add your workflow files to .gitea/workflows/")
    return True


def print_create_repo_hint(repo_name: str, remote: str) -> None:
    info("This is normal if the repository doesn't exist yet.")
    info("To create the repository on Gitea:")
    click.echo("  1. Log in to your Gitea instance")
    click.echo("  2. Click '+' → New Repository")
    click.echo(f"  3. Repository name: {repo_name}")
    click.echo("  4. Do NOT initialize with README")
    click.echo(f"  5. Then run: dualhost push --to gitea (or git push {remote} --all)")


def setup_mirror(url: str, config: DualHostConfig, assume_yes: bool = False) -> None:
    """Add the Gitea mirror to the repository in the current directory.

    Checks git and SSH prerequisites, adds or updates the mirror remote,
    probes it, then offers to push everything and to mirror CI workflows.
    """
    root = Path.cwd()
    remote = config.mirror_remote
    host = parse_ssh_host(url)

    step(f"Setting up Gitea dual hosting for {root.name}")

    if not command_exists("git"):
        fatal("git is not installed. Please install git first.")
    if probe("git", "rev-parse", "--git-dir").returncode != 0:
        fatal("Not a git repository. Run this from the project root.")

    if host:
        info(f"Using SSH connection to {host}")
        check_ssh(host, assume_yes=assume_yes)
    else:
        info("Using HTTPS connection")
        warning("HTTPS will prompt for credentials. SSH is recommended.")

    if add_or_update_remote(remote, url) == "updated":
        success(f"{remote} remote URL updated")
    else:
        success(f"{remote} remote added")
    show_remotes(config.remotes)

    info("Testing Gitea repository connection...")
    if remote_reachable(remote):
        success("Successfully connected to Gitea repository!")
    else:
        warning("Could not connect to Gitea repository.")
        print_create_repo_hint(root.name, remote)

    offer_push(remote, assume_yes=assume_yes)
    offer_gitea_actions(root, assume_yes=assume_yes)

    success("Gitea setup complete!")
    info("Next steps:")
    click.echo("  1. Push to both remotes: dualhost push --to all")
    click.echo("  2. For releases: dualhost release <version> --to all")
    click.echo("  3. View remotes: dualhost remotes")
    click.echo("  4. Sync Gitea manually: dualhost sync-gitea")
    if host is None:
        info("Switch to SSH with:")
        click.echo(f"  git remote set-url {remote} git@<host>:<user>/{root.name}.git")
