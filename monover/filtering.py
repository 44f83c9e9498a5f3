"""Package selection.

``filter_packages`` applies the skip list and explicit targets by exact
name. ``filter_packages_by_patterns`` applies the ``packages`` patterns from
the configuration, which may be globs over names or directories.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from fnmatch import fnmatchcase
from pathlib import Path

from .models import Package

log = logging.getLogger(__name__)


def filter_packages(
    packages: Sequence[Package],
    skip: Sequence[str] = (),
    targets: Sequence[str] = (),
) -> list[Package]:
    """Compute the working set of a run.

    Skipped names are always excluded. When ``targets`` is non-empty only
    those names remain, otherwise every non-skipped package does. Input
    order is preserved.
    """
    skipped = set(skip)
    wanted = set(targets)
    selected = [
        p for p in packages if p.name not in skipped and (not wanted or p.name in wanted)
    ]
    if wanted:
        missing = wanted - {p.name for p in packages}
        if missing:
            log.warning("Target packages not found in workspace: %s", ", ".join(sorted(missing)))
    if not selected:
        log.info("No packages matched the current filters")
    return selected


def matches_pattern(package: Package, pattern: str, root: Path | None = None) -> bool:
    """Check a package against a name or directory pattern.

    ``@scope/*`` matches every package in the scope; other patterns are
    shell globs tried against the package name and its directory relative
    to ``root``.
    """
    if pattern.endswith("/*") and pattern.startswith("@"):
        return package.name.startswith(pattern[:-1])
    if fnmatchcase(package.name, pattern):
        return True
    directory = package.directory
    if root is not None and directory.is_relative_to(root):
        directory = directory.relative_to(root)
    return fnmatchcase(directory.as_posix(), pattern.rstrip("/"))


def filter_packages_by_patterns(
    packages: Sequence[Package], patterns: Sequence[str], root: Path | None = None
) -> list[Package]:
    """Keep packages matching any of ``patterns``; no patterns keeps all."""
    if not patterns:
        return list(packages)
    return [p for p in packages if any(matches_pattern(p, pat, root) for pat in patterns)]
