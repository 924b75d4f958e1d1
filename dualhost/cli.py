"""CLI entry point for dualhost."""

from __future__ import annotations

import os
from pathlib import Path

import click

from dualhost import changelog, publish, tapes
from dualhost.bump import bump_version, current_version
from dualhost.config import DualHostConfig, load_config
from dualhost.migrate import DEFAULT_PROJECTS, migrate_all, migrate_project
from dualhost.release import (
    TARGETS,
    push_all_tags,
    push_branch,
    push_release,
    push_release_all,
    release,
    resolve_remotes,
    sync_mirror,
)
from dualhost.remotes import list_remotes, pull as pull_remote, setup_mirror
from dualhost.shell import command_exists, info
from dualhost.toml import get_package_name, load_manifest
from dualhost.tooling import install_tools, setup_just

target_option = click.option(
    "--to",
    "target",
    type=click.Choice(TARGETS),
    default="github",
    show_default=True,
    help="Which remote(s) to push to.",
)


@click.group()
@click.version_option(package_name="dualhost")
@click.option("-y", "--yes", is_flag=True, help="Answer yes to every prompt.")
@click.option("--remote", help="Primary (GitHub) remote name. [default: origin]")
@click.option("--mirror", help="Mirror (Gitea) remote name. [default: gitea]")
@click.option("--branch", help="Release branch. [default: main]")
@click.pass_context
def cli(
    ctx: click.Context,
    yes: bool,
    remote: str | None,
    mirror: str | None,
    branch: str | None,
) -> None:
    """Release a Rust crate and keep GitHub and Gitea in step."""
    overrides = {
        "primary_remote": remote,
        "mirror_remote": mirror,
        "branch": branch,
    }
    config = load_config(Path.cwd()).model_copy(
        update={k: v for k, v in overrides.items() if v}
    )
    ctx.obj = {"config": config, "yes": yes}


def _config(ctx: click.Context) -> DualHostConfig:
    return ctx.obj["config"]


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show the crate's current version."""
    click.echo(current_version(Path.cwd(), _config(ctx)))


@cli.command(name="info")
@click.pass_context
def info_cmd(ctx: click.Context) -> None:
    """Show project, remote and tool information."""
    config = _config(ctx)
    root = Path.cwd()
    manifest = root / config.manifest
    if not manifest.exists():
        raise click.ClickException(f"No {config.manifest} found in current directory.")

    doc = load_manifest(manifest)
    package = doc.get("package", {})
    click.echo(f"Project: {get_package_name(doc, root.name)}")
    click.echo(f"Version: {current_version(root, config)}")
    if "license" in package:
        click.echo(f"License: {package['license']}")
    click.echo("Remotes:")
    for r in list_remotes():
        click.echo(f"  {r.name:<10} {r.url} ({r.kind})")
    click.echo("Tools:")
    for tool in ("cargo", "just", "git-cliff", "vhs"):
        if command_exists(tool):
            click.echo(f"  {tool:<10} ✅ Yes")
        else:
            click.echo(f"  {tool:<10} ❌ No (run: dualhost install-tools)")


@cli.command()
@click.argument("target")
@click.option("--skip-checks", is_flag=True, help="Don't run fmt/clippy/tests first.")
@click.pass_context
def bump(ctx: click.Context, target: str, skip_checks: bool) -> None:
    """Bump to TARGET (X.Y.Z[-suffix], or major/minor/patch), commit and tag."""
    bump_version(
        target,
        config=_config(ctx),
        assume_yes=ctx.obj["yes"],
        skip_checks=skip_checks,
    )


@cli.command(name="release")
@click.argument("version")
@target_option
@click.option("--skip-checks", is_flag=True, help="Don't run fmt/clippy/tests first.")
@click.pass_context
def release_cmd(
    ctx: click.Context, version: str, target: str, skip_checks: bool
) -> None:
    """Bump to VERSION, then push the branch and tag."""
    release(
        version,
        target,
        _config(ctx),
        assume_yes=ctx.obj["yes"],
        skip_checks=skip_checks,
    )


@cli.command()
@target_option
@click.option("--tags", is_flag=True, help="Push all tags instead of the branch.")
@click.pass_context
def push(ctx: click.Context, target: str, tags: bool) -> None:
    """Push the release branch (or tags) to GitHub, Gitea, or both."""
    if tags:
        push_all_tags(target, _config(ctx))
    else:
        push_branch(target, _config(ctx))


@cli.command()
@click.option(
    "--from",
    "source",
    type=click.Choice(["github", "gitea"]),
    default="github",
    show_default=True,
)
@click.pass_context
def pull(ctx: click.Context, source: str) -> None:
    """Pull the release branch from one remote."""
    config = _config(ctx)
    (remote,) = resolve_remotes(source, config)
    pull_remote(remote, config.branch)


@cli.command(name="push-release")
@target_option
@click.pass_context
def push_release_cmd(ctx: click.Context, target: str) -> None:
    """Push branch and the current version tag, without bumping."""
    push_release(target, _config(ctx))


@cli.command(name="push-release-all")
@click.pass_context
def push_release_all_cmd(ctx: click.Context) -> None:
    """Push branch and all tags to both remotes, without bumping."""
    push_release_all(_config(ctx))


@cli.command(name="sync-gitea")
@click.pass_context
def sync_gitea(ctx: click.Context) -> None:
    """Force-push branch and tags to the Gitea mirror."""
    sync_mirror(_config(ctx))


@cli.command()
def remotes() -> None:
    """Show configured git remotes."""
    found = list_remotes()
    if not found:
        info("No remotes configured")
        return
    click.echo("Configured git remotes:")
    for r in found:
        click.echo(f"  {r.name:<10} {r.url} ({r.kind})")


@cli.command(name="setup-gitea")
@click.argument("url")
@click.pass_context
def setup_gitea(ctx: click.Context, url: str) -> None:
    """Add the Gitea mirror remote at URL to this repository."""
    setup_mirror(url, _config(ctx), assume_yes=ctx.obj["yes"])


@cli.command()
@click.argument("project_dir", required=False, type=click.Path(path_type=Path))
@click.argument("gitea_url", required=False)
@click.option(
    "--template-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Project to copy dual-hosting docs from. [default: sibling tui-slider]",
)
@click.pass_context
def migrate(
    ctx: click.Context,
    project_dir: Path | None,
    gitea_url: str | None,
    template_dir: Path | None,
) -> None:
    """Set up dual GitHub + Gitea hosting for PROJECT_DIR."""
    if project_dir is None:
        project_dir = Path(click.prompt("Project directory", default="."))
    if not gitea_url:
        gitea_url = click.prompt(
            "Gitea repository URL (SSH format, e.g. "
            f"git@gitea.example.com:username/{project_dir.resolve().name}.git)"
        )
    migrate_project(
        project_dir,
        gitea_url,
        _config(ctx),
        assume_yes=ctx.obj["yes"],
        template_dir=template_dir,
    )


@cli.command(name="migrate-all")
@click.argument("host", required=False)
@click.option("--user", help="Gitea username.")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the projects. [default: ~/Projects]",
)
@click.option(
    "-p",
    "--project",
    "projects",
    multiple=True,
    help=f"Project to migrate (repeatable). [default: {', '.join(DEFAULT_PROJECTS)}]",
)
@click.pass_context
def migrate_all_cmd(
    ctx: click.Context,
    host: str | None,
    user: str | None,
    base_dir: Path | None,
    projects: tuple[str, ...],
) -> None:
    """Migrate several sibling projects to git@HOST:USER/<project>.git."""
    host = host or click.prompt("Gitea host (e.g., gitea.example.com)")
    user = user or click.prompt("Gitea username")
    migrate_all(
        host,
        user,
        _config(ctx),
        projects=projects or DEFAULT_PROJECTS,
        base_dir=base_dir,
        assume_yes=ctx.obj["yes"],
    )


@cli.command(name="changelog")
@click.option("--unreleased", is_flag=True, help="Prepend only unreleased commits.")
@click.option("--latest", is_flag=True, help="Only the latest tag.")
@click.option("--tag", help="Treat HEAD as this tag (e.g., v0.2.0).")
@click.option("--preview", is_flag=True, help="Print instead of writing the file.")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Changelog file.")
@click.pass_context
def changelog_cmd(
    ctx: click.Context,
    unreleased: bool,
    latest: bool,
    tag: str | None,
    preview: bool,
    output: Path | None,
) -> None:
    """Generate CHANGELOG.md with git-cliff."""
    if sum([unreleased, latest, bool(tag)]) > 1:
        raise click.UsageError(
            "--unreleased, --latest and --tag are mutually exclusive"
        )
    if preview:
        changelog.preview(unreleased=unreleased)
        return

    output = output or Path(_config(ctx).changelog)
    if unreleased:
        changelog.generate("unreleased", output)
    elif latest:
        changelog.generate("latest", output)
    elif tag:
        changelog.generate("tag", output, tag=tag)
    else:
        changelog.generate("full", output)


@cli.command(name="check-publish")
@click.pass_context
def check_publish(ctx: click.Context) -> None:
    """Check the crate is ready for crates.io (fmt, clippy, tests, docs, files)."""
    results = publish.check_publish(Path.cwd(), _config(ctx))
    if any(not r.passed for r in results):
        ctx.exit(1)


@cli.command(name="publish")
@click.option("--dry-run", is_flag=True, help="Package and verify without uploading.")
def publish_cmd(dry_run: bool) -> None:
    """Publish the crate to crates.io."""
    publish.publish(Path.cwd(), dry_run=dry_run)


@cli.command(name="tapes")
@click.argument("names", nargs=-1)
@click.option("--vhs", "vhs_binary", default="vhs", show_default=True)
@click.pass_context
def tapes_cmd(ctx: click.Context, names: tuple[str, ...], vhs_binary: str) -> None:
    """Record demo GIFs from VHS tapes (all of them when no NAMES are given)."""
    if names:
        tapes.generate(list(names), _config(ctx), vhs_binary=vhs_binary)
    else:
        tapes.generate_all(_config(ctx), vhs_binary=vhs_binary)


@cli.command(name="install-tools")
def install_tools_cmd() -> None:
    """Install just and git-cliff."""
    install_tools()


@cli.command(name="setup-just")
@click.pass_context
def setup_just_cmd(ctx: click.Context) -> None:
    """Set up just, the justfile and shell completion for this project."""
    shell = Path(os.environ.get("SHELL", "")).name or None
    setup_just(shell=shell, assume_yes=ctx.obj["yes"])
