"""Release and mirroring: push branches and tags to GitHub, Gitea, or both.

A release is a bump (see bump.py) followed by pushing the branch and the new
v{version} tag to every target remote, in order. The first failing push halts;
remotes already pushed are left as they are.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from .bump import bump_version, current_version
from .config import DualHostConfig
from .models import VersionBump
from .remotes import push, push_tags
from .shell import step, success

Target = Literal["github", "gitea", "all"]
TARGETS: tuple[str, ...] = ("github", "gitea", "all")


def resolve_remotes(target: Target, config: DualHostConfig) -> list[str]:
    """Map a release target to remote names.

    Examples (default config):
        "github" → ["origin"]
        "gitea" → ["gitea"]
        "all" → ["origin", "gitea"]
    """
    if target == "github":
        return [config.primary_remote]
    if target == "gitea":
        return [config.mirror_remote]
    if target == "all":
        return config.remotes
    raise ValueError(f"Unknown target: {target}")


def _describe(remotes: list[str]) -> str:
    return " and ".join(remotes)


def push_branch(target: Target, config: DualHostConfig) -> None:
    """Push the release branch to the target remotes."""
    remotes = resolve_remotes(target, config)
    for remote in remotes:
        push(remote, config.branch)
    success(f"Pushed {config.branch} to {_describe(remotes)}!")


def push_all_tags(target: Target, config: DualHostConfig) -> None:
    remotes = resolve_remotes(target, config)
    for remote in remotes:
        push_tags(remote)
    success(f"Tags pushed to {_describe(remotes)}!")


def _push_release(tag: str, target: Target, config: DualHostConfig) -> None:
    remotes = resolve_remotes(target, config)
    step(f"Pushing to {_describe(remotes)}")
    for remote in remotes:
        push(remote, config.branch)
    for remote in remotes:
        push(remote, tag)
    success(f"Release {tag} complete on {_describe(remotes)}!")


def push_release(
    target: Target, config: DualHostConfig, *, root: Path | None = None
) -> str:
    """Push the branch, then the tag of the crate's current version.

    Used after a bump that already happened (e.g. a justfile `bump`
    dependency), so `just release patch` pushes the tag that was created
    rather than one named after the bump part.

    Returns:
        The pushed tag.
    """
    tag = f"v{current_version(root or Path.cwd(), config)}"
    _push_release(tag, target, config)
    return tag


def release(
    version: str,
    target: Target,
    config: DualHostConfig,
    *,
    root: Path | None = None,
    assume_yes: bool = False,
    skip_checks: bool = False,
) -> VersionBump | None:
    """Bump to `version`, then push branch and tag to the target remotes.

    Branches go out before tags on every remote so a tag never points at a
    commit the remote does not have.

    Returns:
        The VersionBump, or None if the bump was aborted (nothing pushed).
    """
    bump = bump_version(
        version,
        root=root,
        config=config,
        assume_yes=assume_yes,
        skip_checks=skip_checks,
    )
    if bump is None:
        return None

    _push_release(bump.tag, target, config)
    return bump


def push_release_all(config: DualHostConfig) -> None:
    """Push the branch and all tags to both remotes without bumping."""
    step("Pushing release to both remotes")
    for remote in config.remotes:
        push(remote, config.branch)
    for remote in config.remotes:
        push_tags(remote)
    success("Release pushed to both remotes!")


def sync_mirror(config: DualHostConfig) -> None:
    """Force the mirror to match the local branch and tags."""
    step(f"Syncing {config.mirror_remote} with local {config.branch}")
    push(config.mirror_remote, config.branch, force=True)
    push_tags(config.mirror_remote, force=True)
    success(f"{config.mirror_remote} synced!")
