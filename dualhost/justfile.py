"""Justfile generation and enhancement.

Projects drive dualhost through `just` recipes. A project either gets a
complete justfile rendered from templates/justfile, or has the recipes it
is missing appended to its existing one (after a justfile.backup copy).
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

TEMPLATES_DIR = Path(__file__).parent / "templates"

# A recipe header starts at column 0: `name params: deps`, not `name := value`
_RECIPE_RE = re.compile(r"^@?([A-Za-z_][A-Za-z0-9_-]*)(?:[ \t]+[^:\n]*)?:(?!=)")

COMMON_RECIPES = (
    "default",
    "install-tools",
    "build",
    "test",
    "fmt",
    "fmt-check",
    "clippy",
    "check-all",
    "clean",
    "version",
    "info",
    "bump",
)

# `release*` recipes in the Gitea block depend on `bump`, which depends on these
RELEASE_CHAIN = ("fmt-check", "clippy", "test", "check-all", "bump")


def render_full(project_name: str) -> str:
    """Render the complete justfile, Gitea block included."""
    base = (TEMPLATES_DIR / "justfile").read_text()
    gitea = (TEMPLATES_DIR / "justfile-gitea").read_text()
    return base.replace("__PROJECT_NAME__", project_name) + gitea


def list_recipes(text: str) -> list[str]:
    """Names of the recipes a justfile defines, in order."""
    names: list[str] = []
    for line in text.splitlines():
        m = _RECIPE_RE.match(line)
        if m and m.group(1) not in ("set", "alias", "export", "import", "mod"):
            names.append(m.group(1))
    return names


def recipe_blocks(text: str) -> dict[str, str]:
    """Split a justfile into recipe blocks keyed by recipe name.

    A block is the comment lines directly above the header, the header,
    and the indented body.
    """
    blocks: dict[str, str] = {}
    comments: list[str] = []
    current: list[str] | None = None
    name = ""

    for line in text.splitlines():
        if current is not None and line[:1] in (" ", "\t") and line.strip():
            current.append(line)
            continue
        if current is not None:
            blocks[name] = "\n".join(current)
            current = None
        m = _RECIPE_RE.match(line)
        if m:
            name = m.group(1)
            current = [*comments, line]
            comments = []
        elif line.startswith("#"):
            comments.append(line)
        else:
            comments = []

    if current is not None:
        blocks[name] = "\n".join(current)
    return blocks


def has_mirror_recipes(text: str) -> bool:
    return "push-gitea" in list_recipes(text)


def missing_recipes(text: str, wanted: tuple[str, ...] = COMMON_RECIPES) -> list[str]:
    present = set(list_recipes(text))
    return [name for name in wanted if name not in present]


def _append(path: Path, chunks: list[str]) -> None:
    shutil.copyfile(path, path.with_name(path.name + ".backup"))
    text = path.read_text()
    if not text.endswith("\n"):
        text += "\n"
    path.write_text(text + "\n" + "\n\n".join(chunks) + "\n")


def add_missing_recipes(
    path: Path, wanted: tuple[str, ...] = COMMON_RECIPES
) -> list[str]:
    """Append the template's version of every missing recipe.

    Writes `justfile.backup` first. Does nothing when no recipe is missing.

    Returns:
        Names of the recipes added.
    """
    missing = missing_recipes(path.read_text(), wanted)
    if not missing:
        return []
    blocks = recipe_blocks((TEMPLATES_DIR / "justfile").read_text())
    _append(path, [blocks[name] for name in missing])
    return missing


def ensure_justfile(project_dir: Path, project_name: str) -> str:
    """Make sure the project's justfile has the dual-hosting recipes.

    Returns:
        "present" if they were already there, "appended" if the Gitea
        recipes the justfile lacks (and any recipes the release chain
        needs) were added to it, "created" if a new justfile was written.
    """
    path = project_dir / "justfile"
    if not path.exists():
        path.write_text(render_full(project_name))
        return "created"

    text = path.read_text()
    if has_mirror_recipes(text):
        return "present"

    gitea = (TEMPLATES_DIR / "justfile-gitea").read_text().strip("\n")
    banner = gitea.split("\n\n", 1)[0]
    gitea_blocks = recipe_blocks(gitea)
    # recipes the project already defines are kept as they are
    missing = missing_recipes(text, tuple(gitea_blocks))
    chunks = [banner] + [gitea_blocks[name] for name in missing]
    chain = missing_recipes(text, RELEASE_CHAIN)
    if chain:
        blocks = recipe_blocks((TEMPLATES_DIR / "justfile").read_text())
        chunks = [blocks[name] for name in chain] + chunks
    _append(path, chunks)
    return "appended"
