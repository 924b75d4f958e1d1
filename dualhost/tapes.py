"""Demo GIF generation with VHS.

Each examples/vhs/<name>.tape script records one terminal demo; the tape
itself names its output file.
"""

from __future__ import annotations

from pathlib import Path

import click

from .config import DualHostConfig
from .models import TapeResult
from .shell import command_exists, fatal, info, run, step, success

VHS_INSTALL_HINT = "Install it with: brew install vhs"


def discover_tapes(tape_dir: Path) -> list[Path]:
    """All .tape files directly inside tape_dir, sorted by name."""
    return sorted(p for p in tape_dir.glob("*.tape") if p.is_file())


def record_tape(tape: Path, vhs_binary: str = "vhs", cwd: Path | None = None) -> bool:
    """Record a demo GIF using VHS. Returns True on success."""
    return run(vhs_binary, str(tape), check=False, cwd=cwd).returncode == 0


def _prepare(root: Path, config: DualHostConfig, vhs_binary: str) -> Path:
    if not command_exists(vhs_binary):
        fatal(f"vhs is not installed. {VHS_INSTALL_HINT}")
    tape_dir = root / config.tape_dir
    if not tape_dir.is_dir():
        fatal(f"{config.tape_dir} directory not found")
    (root / config.tape_output_dir).mkdir(parents=True, exist_ok=True)
    return tape_dir


def record_tapes(
    tapes: list[Path], root: Path, vhs_binary: str = "vhs"
) -> list[TapeResult]:
    """Record each tape in turn with [i/N] progress; failures don't stop the run.

    Tapes are recorded from the project root, since their Output and
    Source paths are written relative to it.
    """
    results: list[TapeResult] = []
    total = len(tapes)
    for i, tape in enumerate(tapes, start=1):
        name = tape.stem
        click.echo(f"{click.style(f'[{i}/{total}]', fg='blue')} Generating {name}...")
        ok = record_tape(tape, vhs_binary, cwd=root)
        if ok:
            success(f"Successfully generated {name}.gif")
        else:
            click.secho(f"❌ Failed to generate {name}", fg="red")
        results.append(TapeResult(name=name, path=tape, ok=ok))
    return results


def print_summary(results: list[TapeResult], output_dir: str) -> None:
    failed = sum(1 for r in results if not r.ok)
    step("📊 Summary")
    click.echo(f"   Total tapes: {len(results)}")
    click.secho(f"   Succeeded: {len(results) - failed}", fg="green")
    if failed:
        click.secho(f"   Failed: {failed}", fg="red")
    else:
        success("All demo GIFs generated successfully!")
        info(f"Output directory: {output_dir}")


def generate_all(
    config: DualHostConfig, root: Path | None = None, vhs_binary: str = "vhs"
) -> list[TapeResult]:
    """Record every tape in the tape directory.

    Raises:
        SystemExit: If vhs or the tape directory is missing, no tapes
            exist, or any tape failed to record.
    """
    root = root or Path.cwd()
    tape_dir = _prepare(root, config, vhs_binary)
    tapes = discover_tapes(tape_dir)
    if not tapes:
        fatal(f"No .tape files found in {config.tape_dir}")

    info(f"🎬 Found {len(tapes)} tape(s) to generate")
    results = record_tapes(tapes, root, vhs_binary)
    print_summary(results, config.tape_output_dir)
    if any(not r.ok for r in results):
        fatal("Some tapes failed to generate")
    return results


def generate(
    names: list[str],
    config: DualHostConfig,
    root: Path | None = None,
    vhs_binary: str = "vhs",
) -> list[TapeResult]:
    """Record only the named tapes (names without the .tape suffix)."""
    root = root or Path.cwd()
    tape_dir = _prepare(root, config, vhs_binary)
    tapes: list[Path] = []
    for name in names:
        tape = tape_dir / f"{name.removesuffix('.tape')}.tape"
        if not tape.is_file():
            fatal(f"Tape not found: {tape.relative_to(root)}")
        tapes.append(tape)

    results = record_tapes(tapes, root, vhs_binary)
    if any(not r.ok for r in results):
        fatal("Some tapes failed to generate")
    return results
