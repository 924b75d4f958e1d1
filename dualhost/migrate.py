"""Migrate existing projects to dual GitHub + Gitea hosting.

A migration adds the Gitea remote, copies the dual-hosting docs from a
template project, makes sure the justfile carries the push/release recipes,
and offers to push everything. migrate_all() repeats that for a list of
sibling projects and records a summary file.
"""

from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path

import click

from .config import DualHostConfig
from .justfile import ensure_justfile
from .models import MigrationOutcome
from .remotes import (
    add_or_update_remote,
    check_ssh,
    offer_gitea_actions,
    offer_push,
    parse_ssh_host,
    print_create_repo_hint,
    remote_reachable,
    show_remotes,
)
from .shell import confirm, fatal, info, step, success, warning

TEMPLATE_PROJECT = "tui-slider"
DEFAULT_PROJECTS = ("tui-slider", "tui-piechart", "tui-checkbox")


def find_template_dir(
    project_dir: Path, name: str = TEMPLATE_PROJECT, home: Path | None = None
) -> Path | None:
    """Locate the template project: a sibling directory, then ~/Projects/<name>."""
    candidates = (project_dir.parent / name, (home or Path.home()) / "Projects" / name)
    for candidate in candidates:
        if candidate.is_dir() and candidate.resolve() != project_dir.resolve():
            return candidate
    return None


def copy_template_files(
    template_dir: Path, project_dir: Path, docs: list[str]
) -> list[str]:
    """Copy dual-hosting docs and scripts/setup-gitea.sh from the template.

    Returns:
        Relative paths of the files copied.
    """
    copied: list[str] = []
    for doc in docs:
        src = template_dir / doc
        if src.is_file():
            shutil.copy2(src, project_dir / doc)
            copied.append(doc)

    script = template_dir / "scripts" / "setup-gitea.sh"
    if script.is_file():
        dest = project_dir / "scripts"
        dest.mkdir(exist_ok=True)
        shutil.copy2(script, dest / script.name)
        (dest / script.name).chmod(0o755)
        copied.append("scripts/setup-gitea.sh")
    return copied


def migrate_project(
    project_dir: Path,
    gitea_url: str,
    config: DualHostConfig,
    *,
    assume_yes: bool = False,
    template_dir: Path | None = None,
    home: Path | None = None,
) -> MigrationOutcome:
    """Add Gitea hosting to one project.

    Args:
        project_dir: Project root (must be a git repository).
        gitea_url: Mirror URL, SSH form strongly preferred.
        config: Settings (remote names are taken from here).
        assume_yes: Answer every prompt with yes.
        template_dir: Project to copy docs from; searched for when omitted.
        home: Home directory override for SSH key and template lookup.

    Raises:
        SystemExit: If the directory, repository or URL is unusable, or a
            required git command fails.
    """
    if not project_dir.is_dir():
        fatal(f"Project directory does not exist: {project_dir}")
    project_dir = project_dir.resolve()
    if not gitea_url:
        fatal("Gitea URL is required")
    if not (project_dir / ".git").exists():
        fatal(f"Not a git repository: {project_dir}")

    name = project_dir.name
    remote = config.mirror_remote
    host = parse_ssh_host(gitea_url)
    if host is None:
        warning("HTTPS URL detected. SSH is strongly recommended!")

    template_dir = template_dir or find_template_dir(project_dir, home=home)
    if template_dir is None:
        warning(f"{TEMPLATE_PROJECT} template not found. Will create minimal setup.")
    else:
        info(f"Using template from: {template_dir}")

    step(f"Migrating {name} to Gitea")
    info(f"Project: {name}")
    info(f"Directory: {project_dir}")
    info(f"Gitea URL: {gitea_url}")
    if host:
        info(f"Gitea Host: {host}")
        step("Checking SSH Configuration")
        check_ssh(host, assume_yes=assume_yes, home=home)

    step("Adding Gitea Remote")
    if add_or_update_remote(remote, gitea_url, cwd=project_dir) == "updated":
        success(f"{remote} remote URL updated")
    else:
        success(f"{remote} remote added")
    show_remotes(config.remotes, cwd=project_dir)

    if template_dir is not None:
        step("Copying Template Files")
        docs = config.template_docs
        for copied in copy_template_files(template_dir, project_dir, docs):
            success(f"Copied {copied}")

    step("Updating Justfile")
    status = ensure_justfile(project_dir, name)
    if status == "present":
        success("Gitea commands already present in justfile")
    elif status == "appended":
        success("Backed up justfile to justfile.backup")
        success("Added Gitea commands to justfile")
    else:
        success("Created justfile with all commands")
        info("Customize project-specific recipes such as 'run'")

    step("Testing Gitea Connection")
    if remote_reachable(remote, cwd=project_dir):
        success("Successfully connected to Gitea repository!")
    else:
        warning("Could not connect to Gitea repository")
        print_create_repo_hint(name, remote)

    step("Push to Gitea")
    offer_push(remote, assume_yes=assume_yes, cwd=project_dir)
    offer_gitea_actions(project_dir, assume_yes=assume_yes)

    step("Migration Complete! 🎉")
    success(f"Project {name} migrated to Gitea!")
    info("Quick commands:")
    click.echo("  just push-all         # Push to both GitHub and Gitea")
    click.echo("  just sync-gitea       # Sync Gitea with GitHub")
    click.echo("  just release-all X.Y.Z")
    if host is None:
        info("Switch to SSH with:")
        click.echo(f"  git remote set-url {remote} git@<host>:<user>/{name}.git")
    return MigrationOutcome(project=name, status="succeeded")


def write_summary(
    outcomes: list[MigrationOutcome], host: str, user: str, home: Path | None = None
) -> Path:
    """Write ~/gitea-migration-<timestamp>.txt and return its path."""
    now = datetime.now()
    path = (home or Path.home()) / f"gitea-migration-{now:%Y%m%d-%H%M%S}.txt"

    def section(title: str, status: str) -> list[str]:
        names = [o.project for o in outcomes if o.status == status]
        return [f"{title} ({len(names)}):", *(f"  - {n}" for n in names), ""]

    lines = [
        "Gitea Migration Summary",
        f"Date: {now:%Y-%m-%d %H:%M:%S}",
        f"Gitea Host: {host}",
        f"Username: {user}",
        "",
        *section("Successful Migrations", "succeeded"),
        *section("Failed Migrations", "failed"),
        *section("Skipped", "skipped"),
        "Next Steps:",
        "1. Test each project: cd <project> && just push-all",
        "2. Verify remotes: just remotes",
        "3. Review documentation in each project",
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


def migrate_all(
    host: str,
    user: str,
    config: DualHostConfig,
    *,
    projects: tuple[str, ...] = DEFAULT_PROJECTS,
    base_dir: Path | None = None,
    assume_yes: bool = False,
    home: Path | None = None,
) -> list[MigrationOutcome]:
    """Migrate several projects under base_dir to git@host:user/<project>.git.

    Missing directories and non-repositories are skipped. A project whose
    migration halts is recorded as failed and the batch moves on; the user
    is asked before each next project.

    Returns:
        One outcome per project attempted.
    """
    if not host:
        fatal("Gitea host is required")
    if not user:
        fatal("Gitea username is required")
    base_dir = base_dir or (home or Path.home()) / "Projects"

    step("Batch Migration to Gitea")
    info(f"Gitea Host: {host}")
    info(f"Username: {user}")
    info(f"Base Directory: {base_dir}")
    info(f"Projects to migrate: {len(projects)}")
    for project in projects:
        click.echo(f"  • {project}")
    if not confirm("Continue with migration?", default=False, assume_yes=assume_yes):
        info("Migration cancelled")
        return []

    outcomes: list[MigrationOutcome] = []
    for i, project in enumerate(projects):
        project_dir = base_dir / project
        url = f"git@{host}:{user}/{project}.git"

        if not project_dir.is_dir():
            warning(f"Project directory not found: {project_dir}")
            outcomes.append(
                MigrationOutcome(project=project, status="skipped", detail="not found")
            )
            continue
        if not (project_dir / ".git").exists():
            warning(f"Not a git repository: {project_dir}")
            outcomes.append(
                MigrationOutcome(
                    project=project, status="skipped", detail="not a git repository"
                )
            )
            continue

        try:
            outcomes.append(
                migrate_project(
                    project_dir, url, config, assume_yes=assume_yes, home=home
                )
            )
            success(f"Successfully migrated {project}")
        except SystemExit:
            click.secho(f"❌ Failed to migrate {project}", fg="red", err=True)
            outcomes.append(
                MigrationOutcome(
                    project=project, status="failed", detail="migration halted"
                )
            )

        if i < len(projects) - 1 and not confirm(
            "Continue to next project?", default=True, assume_yes=assume_yes
        ):
            warning("Stopping migration")
            break

    print_summary(outcomes)
    summary = write_summary(outcomes, host, user, home=home)
    success(f"Summary saved to: {summary}")
    return outcomes


def print_summary(outcomes: list[MigrationOutcome]) -> None:
    step("Migration Summary")
    marks = {
        "succeeded": ("✓", "green"),
        "failed": ("✗", "red"),
        "skipped": ("○", "yellow"),
    }
    titles = {
        "succeeded": "Successfully migrated",
        "failed": "Failed to migrate",
        "skipped": "Skipped",
    }
    for status, title in titles.items():
        names = [o.project for o in outcomes if o.status == status]
        if not names:
            continue
        mark, colour = marks[status]
        click.secho(f"{title} ({len(names)}):", fg=colour)
        for name in names:
            click.echo(f"  {click.style(mark, fg=colour)} {name}")
