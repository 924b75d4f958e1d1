"""Tests for dualhost.justfile."""

from __future__ import annotations

from pathlib import Path

from dualhost.justfile import (
    COMMON_RECIPES,
    add_missing_recipes,
    ensure_justfile,
    list_recipes,
    missing_recipes,
    recipe_blocks,
    render_full,
)

EXISTING = """\
set shell := ["bash", "-c"]
crate := "tui-slider"

# Build the project
build:
    cargo build

@test *args:
    cargo test {{args}}

run example="demo": build
    cargo run --example {{example}}
"""


class TestListRecipes:
    def test_headers_only(self) -> None:
        assert list_recipes(EXISTING) == ["build", "test", "run"]

    def test_ignores_assignments_and_bodies(self) -> None:
        text = 'version := "1"\nbuild:\n    echo version: done\n'
        assert list_recipes(text) == ["build"]

    def test_template_has_common_recipes(self) -> None:
        recipes = list_recipes(render_full("tui-slider"))
        for name in COMMON_RECIPES:
            assert name in recipes
        for name in ("push-gitea", "release-all", "sync-gitea", "setup-gitea"):
            assert name in recipes


def test_render_full_substitutes_project_name() -> None:
    text = render_full("tui-piechart")
    assert text.startswith("# tui-piechart")
    assert "__PROJECT_NAME__" not in text


def test_recipe_blocks_keep_comments_and_body() -> None:
    blocks = recipe_blocks(EXISTING)
    assert blocks["build"] == "# Build the project\nbuild:\n    cargo build"
    assert blocks["run"].endswith("cargo run --example {{example}}")


def test_missing_recipes() -> None:
    missing = missing_recipes(EXISTING)
    assert "build" not in missing
    assert "test" not in missing
    assert missing[0] == "default"
    assert "bump" in missing


class TestAddMissingRecipes:
    def test_appends_and_backs_up(self, tmp_path: Path) -> None:
        path = tmp_path / "justfile"
        path.write_text(EXISTING)

        added = add_missing_recipes(path, ("fmt", "clippy", "build"))

        assert added == ["fmt", "clippy"]
        assert (tmp_path / "justfile.backup").read_text() == EXISTING
        text = path.read_text()
        assert text.startswith(EXISTING)
        assert list_recipes(text) == ["build", "test", "run", "fmt", "clippy"]

    def test_nothing_missing(self, tmp_path: Path) -> None:
        path = tmp_path / "justfile"
        path.write_text(EXISTING)

        assert add_missing_recipes(path, ("build",)) == []
        assert not (tmp_path / "justfile.backup").exists()


class TestEnsureJustfile:
    def test_creates(self, tmp_path: Path) -> None:
        assert ensure_justfile(tmp_path, "tui-checkbox") == "created"
        assert "push-all" in list_recipes((tmp_path / "justfile").read_text())

    def test_present(self, tmp_path: Path) -> None:
        (tmp_path / "justfile").write_text(render_full("x"))
        assert ensure_justfile(tmp_path, "x") == "present"
        assert not (tmp_path / "justfile.backup").exists()

    def test_appends_gitea_block_with_release_chain(self, tmp_path: Path) -> None:
        (tmp_path / "justfile").write_text(EXISTING)

        assert ensure_justfile(tmp_path, "tui-slider") == "appended"

        recipes = list_recipes((tmp_path / "justfile").read_text())
        assert recipes.count("test") == 1
        for name in ("bump", "check-all", "fmt-check", "clippy", "release-all"):
            assert name in recipes
        assert recipes.index("bump") < recipes.index("push")
        assert (tmp_path / "justfile.backup").read_text() == EXISTING

    def test_keeps_existing_push_and_release_recipes(self, tmp_path: Path) -> None:
        existing = EXISTING + (
            "\n# Push to the default remote\n"
            "push:\n"
            "    git push\n"
            "\n"
            "release version: (bump version)\n"
            "    ./scripts/release.sh {{version}}\n"
        )
        (tmp_path / "justfile").write_text(existing)

        assert ensure_justfile(tmp_path, "tui-slider") == "appended"

        text = (tmp_path / "justfile").read_text()
        recipes = list_recipes(text)
        for name in ("push", "release", "test"):
            assert recipes.count(name) == 1
        for name in ("push-gitea", "pull", "release-all", "setup-gitea", "bump"):
            assert name in recipes
        assert "./scripts/release.sh {{version}}" in text
        assert text.count("Gitea Dual-Hosting Commands") == 1


def test_release_recipes_push_the_bumped_version() -> None:
    blocks = recipe_blocks(render_full("tui-slider"))

    targets = {"release": "github", "release-gitea": "gitea", "release-all": "all"}
    for name, target in targets.items():
        block = blocks[name]
        assert "(bump version)" in block
        assert f"dualhost push-release --to {target}" in block
        assert "git push" not in block
        assert "v{{version}}" not in block
