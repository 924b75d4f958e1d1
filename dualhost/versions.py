"""Version parsing and bumping utilities.

Handles validation of user-supplied release versions, conversion between
version strings and semver objects (with padding for incomplete strings such
as "1.0"), and rewriting of README version badges.
"""

from __future__ import annotations

import re

import semver

VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?$")
BUMP_PARTS = ("major", "minor", "patch")

# shields.io style: .../badge/version-0.2.0-blue, version-0.2.0-rc-1-blue,
# version-0.2.0+build.5-blue; suffixes use the same classes as VERSION_RE
BADGE_RE = re.compile(
    r"version-\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+?)?(?:\+[0-9A-Za-z.-]+?)?-blue"
)


def validate_version(version_str: str) -> str:
    """Check that a release version is a full semantic version.

    Accepts X.Y.Z with optional -prerelease and +build parts
    (e.g. "0.2.0", "0.2.0-beta.1"). A leading "v" is rejected because
    tags are derived by prefixing one.

    Raises:
        ValueError: With a message describing the expected format.
    """
    if not VERSION_RE.match(version_str) or not semver.Version.is_valid(version_str):
        raise ValueError(
            f"Invalid version format: {version_str!r}\n"
            "Version must be in format: X.Y.Z or X.Y.Z-suffix "
            "(e.g., 0.2.0 or 0.2.0-beta.1)"
        )
    return version_str


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-rc.1" → "1.2.3-rc.1"
    """
    if semver.Version.is_valid(version_str):
        return semver.Version.parse(version_str)
    parts = version_str.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    return semver.Version.parse(".".join(parts[:3]))


def bump_patch(version_str: str) -> str:
    """Increment the patch version and return as a string.

    Examples:
        "1.2.3" → "1.2.4"
        "1.0" → "1.0.1"
    """
    return str(parse_version(version_str).bump_patch())


def bump_minor(version_str: str) -> str:
    """Increment the minor version, resetting patch: "1.2.3" → "1.3.0"."""
    return str(parse_version(version_str).bump_minor())


def bump_major(version_str: str) -> str:
    """Increment the major version: "1.2.3" → "2.0.0"."""
    return str(parse_version(version_str).bump_major())


def resolve_target(current: str, target: str) -> str:
    """Turn a bump argument into the concrete new version.

    `target` is either an explicit version ("0.3.0") or one of
    "major", "minor", "patch" applied to `current`.

    Raises:
        ValueError: If target is neither a bump part nor a valid version.
    """
    if target in BUMP_PARTS:
        bumpers = {"major": bump_major, "minor": bump_minor, "patch": bump_patch}
        return bumpers[target](current)
    return validate_version(target)


def update_badge(text: str, version: str) -> tuple[str, int]:
    """Point every version badge in `text` at `version`.

    Returns:
        Tuple of (new text, number of badges rewritten).
    """
    return BADGE_RE.subn(f"version-{version}-blue", text)
