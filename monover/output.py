"""Machine-readable run summary for ``--json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .models import ReleaseResult


def _display_path(path: Path, root: Path | None) -> str:
    if root is not None and path.is_relative_to(root):
        return path.relative_to(root).as_posix()
    return str(path)


def build_json_output(
    result: ReleaseResult, dry_run: bool, root: Path | None = None
) -> dict[str, Any]:
    """Describe a run as a JSON-serialisable dict.

    One entry is emitted per touched manifest, so a package with both a
    package.json and a Cargo.toml appears twice.
    """
    updates: list[dict[str, Any]] = []
    for unit in result.updated_packages:
        paths = unit.manifest_paths or [None]
        for path in paths:
            updates.append(
                {
                    "packageName": unit.package,
                    "newVersion": unit.next_version,
                    "filePath": _display_path(path, root) if path else None,
                }
            )
    return {
        "dryRun": dry_run,
        "updates": updates,
        "commitMessage": result.commit_message,
        "tags": list(result.tags),
    }


def render_json_output(result: ReleaseResult, dry_run: bool, root: Path | None = None) -> str:
    return json.dumps(build_json_output(result, dry_run, root), indent=2)
