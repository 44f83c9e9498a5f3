"""Workspace discovery.

Member directories are read from the root manifests:

- pyproject.toml: [tool.uv.workspace].members
- Cargo.toml: [workspace].members
- package.json: "workspaces" (a list, or {"packages": [...]})

A repository without workspace members is treated as a single package, the
one described by its root manifest.
"""

from __future__ import annotations

import glob
import json
import logging
from pathlib import Path

from .errors import VersionErrorCode, version_error
from .manifests import MANIFEST_FILES, read_manifest_version
from .models import Package, Workspace
from .shell import step
from .toml import get_cargo_name, get_project_name, get_workspace_member_globs, load_toml

log = logging.getLogger(__name__)


def _npm_workspace_globs(path: Path) -> list[str]:
    data = json.loads(path.read_text())
    workspaces = data.get("workspaces") if isinstance(data, dict) else None
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    return [str(w) for w in workspaces or []]


def member_globs(root: Path) -> list[str]:
    """Collect workspace member patterns from every root manifest."""
    patterns: list[str] = []
    if (root / "package.json").exists():
        patterns.extend(_npm_workspace_globs(root / "package.json"))
    for name in ("Cargo.toml", "pyproject.toml"):
        if (root / name).exists():
            patterns.extend(get_workspace_member_globs(load_toml(root / name)))
    # keep first occurrence, drop duplicates across manifests
    return list(dict.fromkeys(patterns))


def package_name(directory: Path) -> str | None:
    """Name declared by the first manifest in ``directory`` that has one."""
    for manifest in MANIFEST_FILES:
        path = directory / manifest
        if not path.exists():
            continue
        if manifest == "package.json":
            name = json.loads(path.read_text()).get("name")
            if name:
                return str(name)
        elif manifest == "Cargo.toml":
            doc = load_toml(path)
            if "package" in doc:
                return get_cargo_name(doc, directory.name)
        else:
            doc = load_toml(path)
            if "project" in doc:
                return get_project_name(doc, directory.name)
    return None


def _load_package(directory: Path) -> Package | None:
    name = package_name(directory)
    if name is None:
        return None
    manifest = read_manifest_version(directory)
    return Package(
        name=name,
        directory=directory.resolve(),
        manifest_version=manifest.version if manifest else None,
    )


def discover_workspace(root: Path | None = None) -> Workspace:
    """Scan the repository and list its packages.

    Args:
        root: Repository root. Defaults to the current directory.

    Returns:
        The workspace, packages in glob order (sorted per pattern).

    Raises:
        VersionError: PACKAGES_NOT_FOUND when no package can be found.
        ValueError, OSError: If a manifest cannot be parsed.
    """
    step("Discovering workspace packages")
    root = (root or Path.cwd()).resolve()

    excluded: set[Path] = set()
    member_dirs: list[Path] = []
    for pattern in member_globs(root):
        negated = pattern.startswith("!")
        for match in sorted(glob.glob(str(root / pattern.lstrip("!")))):
            p = Path(match)
            if not p.is_dir():
                continue
            if negated:
                excluded.add(p)
            elif p not in member_dirs:
                member_dirs.append(p)

    packages: list[Package] = []
    seen: set[str] = set()
    for d in member_dirs:
        if d in excluded:
            continue
        pkg = _load_package(d)
        if pkg is None:
            log.debug("Skipping %s: no manifest with a package name", d)
            continue
        if pkg.name in seen:
            log.warning("Duplicate package name %s in %s, skipping", pkg.name, d)
            continue
        seen.add(pkg.name)
        packages.append(pkg)

    root_package = _load_package(root)
    if not packages:
        if root_package is None:
            raise version_error(
                VersionErrorCode.PACKAGES_NOT_FOUND, f"no package manifest found in {root}"
            )
        packages = [root_package]

    for pkg in packages:
        log.info("  %s %s (%s)", pkg.name, pkg.manifest_version or "-", pkg.directory)

    return Workspace(root=root, packages=packages, root_package=root_package)
