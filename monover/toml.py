"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying
pyproject.toml and Cargo.toml files. This keeps version bumps as one-line,
diff-friendly changes.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from packaging.utils import canonicalize_name


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text())


def save_toml(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_project_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the canonical package name from [project].name.

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores) for consistent comparison.

    Args:
        doc: Parsed pyproject.toml document.
        fallback: Value to return if name is not specified.
    """
    return canonicalize_name(doc.get("project", {}).get("name", fallback))


def get_project_version(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract version from [project].version.

    Returns None when the version is missing or declared dynamic.
    """
    version = doc.get("project", {}).get("version")
    return str(version) if version is not None else None


def get_cargo_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the crate name from [package].name."""
    return str(doc.get("package", {}).get("name", fallback))


def get_cargo_version(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract version from [package].version.

    Workspace-inherited versions (``version.workspace = true``) are not
    plain strings and are reported as missing.
    """
    version = doc.get("package", {}).get("version")
    return str(version) if isinstance(version, str) else None


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns.

    Reads [tool.uv.workspace].members for Python workspaces and
    [workspace].members for Cargo workspaces. These patterns (e.g.,
    "packages/*", "crates/*") define which directories contain workspace
    packages. Returns an empty list when no members are defined.
    """
    uv_members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    cargo_members = doc.get("workspace", {}).get("members")
    return [str(m) for m in (uv_members or [])] + [str(m) for m in (cargo_members or [])]
