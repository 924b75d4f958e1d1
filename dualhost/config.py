"""Per-project settings.

Defaults describe the usual layout: GitHub as `origin`, Gitea as `gitea`,
releases cut from `main`. A crate can override any of them in its
Cargo.toml:

    [package.metadata.dualhost]
    mirror_remote = "forgejo"
    branch = "trunk"
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from .shell import fatal
from .toml import get_tool_config, load_manifest


class DualHostConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    primary_remote: str = "origin"
    mirror_remote: str = "gitea"
    branch: str = "main"
    manifest: str = "Cargo.toml"
    lockfile: str = "Cargo.lock"
    readme: str = "README.md"
    changelog: str = "CHANGELOG.md"
    tape_dir: str = "examples/vhs"
    tape_output_dir: str = "examples/vhs/output"
    required_files: list[str] = Field(
        default_factory=lambda: ["README.md", "LICENSE", "Cargo.toml", "CHANGELOG.md"]
    )
    template_docs: list[str] = Field(
        default_factory=lambda: ["SSH_SETUP.md", "GITEA_SETUP.md", "DUAL_HOSTING.md"]
    )

    @property
    def remotes(self) -> list[str]:
        return [self.primary_remote, self.mirror_remote]


def load_config(root: Path | None = None) -> DualHostConfig:
    """Load settings from root/Cargo.toml, falling back to defaults.

    Raises:
        SystemExit: If Cargo.toml is not valid TOML or the
            [package.metadata.dualhost] table is invalid.
    """
    root = root or Path.cwd()
    manifest = root / "Cargo.toml"
    if not manifest.exists():
        return DualHostConfig()

    try:
        doc = load_manifest(manifest)
    except TOMLKitError as exc:
        fatal(f"Could not parse {manifest}: {exc}")
    raw = get_tool_config(doc)
    try:
        config = DualHostConfig(**raw)
    except ValidationError as exc:
        fatal(f"Invalid [package.metadata.dualhost] in {manifest}:\n{exc}")
    return config
