"""Tests for monover.output."""

from __future__ import annotations

import json
from pathlib import Path

from monover.models import ReleaseResult, ReleaseUnit
from monover.output import build_json_output, render_json_output


class TestBuildJsonOutput:
    """Tests for build_json_output()."""

    def test_one_entry_per_manifest(self, tmp_path: Path) -> None:
        result = ReleaseResult(
            updated_packages=[
                ReleaseUnit(
                    package="app",
                    next_version="2.0.0",
                    manifest_paths=[tmp_path / "package.json", tmp_path / "Cargo.toml"],
                )
            ],
            tags=["v2.0.0"],
            commit_message="chore(release): app 2.0.0",
        )

        data = build_json_output(result, dry_run=False, root=tmp_path)

        assert data["dryRun"] is False
        assert [u["filePath"] for u in data["updates"]] == ["package.json", "Cargo.toml"]
        assert data["commitMessage"] == "chore(release): app 2.0.0"
        assert data["tags"] == ["v2.0.0"]

    def test_package_without_manifest(self) -> None:
        result = ReleaseResult(updated_packages=[ReleaseUnit(package="x", next_version="0.1.0")])

        data = build_json_output(result, dry_run=True)

        assert data["updates"] == [{"packageName": "x", "newVersion": "0.1.0", "filePath": None}]

    def test_empty_run(self) -> None:
        assert json.loads(render_json_output(ReleaseResult(), dry_run=True)) == {
            "dryRun": True,
            "updates": [],
            "commitMessage": None,
            "tags": [],
        }
