"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import tomlkit

from monover.models import Package


def write_package_json(directory: Path, name: str, version: str | None = "1.0.0") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    data: dict[str, object] = {"name": name}
    if version is not None:
        data["version"] = version
    path = directory / "package.json"
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


def write_cargo_toml(directory: Path, name: str, version: str = "1.0.0") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "Cargo.toml"
    path.write_text(
        f'[package]\nname = "{name}"\nversion = "{version}"  # keep in sync\nedition = "2021"\n'
    )
    return path


def write_pyproject(directory: Path, name: str, version: str = "1.0.0") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "pyproject.toml"
    path.write_text(f'[project]\nname = "{name}"\nversion = "{version}"\n')
    return path


@pytest.fixture
def npm_workspace(tmp_path: Path) -> Path:
    """A package.json workspace with two packages at 0.1.0."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "root", "private": True, "workspaces": ["packages/*"]})
    )
    write_package_json(tmp_path / "packages" / "a", "pkg-a", "0.1.0")
    write_package_json(tmp_path / "packages" / "b", "pkg-b", "0.1.0")
    return tmp_path


@pytest.fixture
def sample_packages(tmp_path: Path) -> list[Package]:
    """Three packages without files on disk."""
    return [
        Package(name="pkg-a", directory=tmp_path / "packages" / "a", manifest_version="1.0.0"),
        Package(name="pkg-b", directory=tmp_path / "packages" / "b", manifest_version="2.0.0"),
        Package(name="@scope/c", directory=tmp_path / "libs" / "c", manifest_version="0.1.0"),
    ]


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """A pyproject.toml document declaring a uv workspace."""
    content = """\
[project]
name = "My_Package"
version = "2.0.0"
dependencies = ["click>=8.0"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]
"""
    return tomlkit.parse(content)
