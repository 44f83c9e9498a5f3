"""Manifest reading and writing.

A package directory may carry several manifests at once (a Node + Rust
hybrid has both package.json and Cargo.toml). Reading picks the first
manifest that declares a version, in MANIFEST_FILES order. Writing updates
every manifest present so all of them carry the same version.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, cast

from .errors import VersionErrorCode, version_error
from .models import ManifestType, ManifestVersion
from .toml import get_cargo_version, get_project_version, load_toml, save_toml

log = logging.getLogger(__name__)

MANIFEST_FILES: tuple[ManifestType, ...] = ("package.json", "Cargo.toml", "pyproject.toml")


def _read_json(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def read_version(path: Path) -> str | None:
    """Read the version declared by a single manifest file.

    Returns None when the file has no version field. Unreadable files are
    logged and treated as having no version.
    """
    try:
        if path.name == "package.json":
            version = _read_json(path).get("version")
            return str(version) if version else None
        doc = load_toml(path)
        if path.name == "Cargo.toml":
            return get_cargo_version(doc)
        return get_project_version(doc)
    except (OSError, ValueError) as exc:
        log.warning("Error reading %s: %s", path, exc)
        return None


def read_manifest_version(directory: Path) -> ManifestVersion | None:
    """Find the version of the package in ``directory``.

    Checks package.json, then Cargo.toml, then pyproject.toml and returns
    the first one that declares a version, or None if none does.
    """
    for manifest_type in MANIFEST_FILES:
        path = directory / manifest_type
        if not path.exists():
            continue
        version = read_version(path)
        if version:
            log.debug("Found version %s in %s", version, path)
            return ManifestVersion(
                version=version, manifest_path=path, manifest_type=manifest_type
            )
        log.debug("No version field found in %s", path)
    return None


def find_manifests(
    directory: Path, *, cargo_enabled: bool = True, cargo_paths: Sequence[str] = ()
) -> list[Path]:
    """List every versioned manifest belonging to the package in ``directory``.

    Args:
        directory: Package directory.
        cargo_enabled: Include Cargo.toml files.
        cargo_paths: When given, the Cargo.toml files under these
            sub-directories are used instead of the package's own.

    Returns:
        Existing manifest paths that declare a version.
    """
    candidates: list[Path] = [directory / "package.json"]
    if cargo_enabled:
        if cargo_paths:
            candidates.extend((directory / p / "Cargo.toml").resolve() for p in cargo_paths)
        else:
            candidates.append(directory / "Cargo.toml")
    candidates.append(directory / "pyproject.toml")

    return [p for p in candidates if p.exists() and read_version(p) is not None]


def write_manifest_version(path: Path, version: str) -> None:
    """Set the version field of a manifest file.

    package.json is rewritten with two-space indentation and a trailing
    newline. TOML manifests are edited in place through tomlkit, so
    comments and layout survive.

    Raises:
        VersionError: If the file cannot be read, parsed or written.
    """
    try:
        if path.name == "package.json":
            data = _read_json(path)
            data["version"] = version
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        elif path.name == "Cargo.toml":
            doc = load_toml(path)
            cast(dict[str, Any], doc["package"])["version"] = version
            save_toml(path, doc)
        elif path.name == "pyproject.toml":
            doc = load_toml(path)
            cast(dict[str, Any], doc["project"])["version"] = version
            save_toml(path, doc)
        else:
            raise ValueError(f"Unsupported manifest type: {path.name}")
    except (OSError, ValueError, KeyError) as exc:
        raise version_error(VersionErrorCode.MANIFEST_ERROR, f"{path}: {exc}") from exc

    log.info("Updated %s to version %s", path, version)
