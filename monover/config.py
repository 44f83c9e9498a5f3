"""Configuration loading.

Settings come from ``version.config.json`` (camelCase keys) or from the
``[tool.monover]`` table of the root pyproject.toml. Both spellings of a key
are accepted, so ``tagPrefix`` and ``version_prefix`` configure the same
field.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .errors import VersionErrorCode, version_error
from .toml import load_toml
from .versions import ReleaseType, clean_version

log = logging.getLogger(__name__)

CONFIG_FILENAME = "version.config.json"

MismatchStrategy = Literal["warn", "ignore", "error", "prefer-git", "prefer-package"]
ChangelogFormat = Literal["keep-a-changelog", "angular"]


class CargoConfig(BaseModel):
    """Cargo.toml handling.

    Attributes:
        enabled: Update Cargo.toml files next to package.json.
        paths: Directories (relative to each package) whose Cargo.toml
            should be updated instead of the package's own.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = True
    paths: list[str] = Field(default_factory=list)


class VersionConfig(BaseModel):
    """All settings that influence a release run."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    preset: str = "conventional-commits"
    version_prefix: str = Field(
        default="v",
        validation_alias=AliasChoices("versionPrefix", "tagPrefix", "version_prefix"),
    )
    tag_template: str = "${prefix}${version}"
    package_tag_template: str = "${packageName}@${prefix}${version}"
    package_specific_tags: bool = False
    base_branch: str = "main"
    branch_pattern: list[str] = Field(default_factory=list)
    default_release_type: ReleaseType | None = None
    version_strategy: Literal["branchPattern", "commitMessage"] | None = None
    synced: bool = False
    packages: list[str] = Field(default_factory=list)
    skip: list[str] = Field(default_factory=list)
    commit_message: str | None = None
    prerelease_identifier: str | None = None
    type: ReleaseType | None = Field(
        default=None, validation_alias=AliasChoices("type", "forceType", "force_type")
    )
    skip_hooks: bool = False
    dry_run: bool = False
    initial_version: str | None = "0.1.0"
    mismatch_strategy: MismatchStrategy = "warn"
    update_changelog: bool = False
    changelog_format: ChangelogFormat = "keep-a-changelog"
    cargo: CargoConfig = Field(default_factory=CargoConfig)

    @field_validator("initial_version")
    @classmethod
    def _check_initial_version(cls, value: str | None) -> str | None:
        if value is not None and clean_version(value) is None:
            raise ValueError(f"not a valid version: {value}")
        return value


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        if path.suffix == ".toml":
            doc = load_toml(path)
            table = doc.get("tool", {}).get("monover", {})
            return table.unwrap() if hasattr(table, "unwrap") else dict(table)
        return json.loads(path.read_text())
    except FileNotFoundError as exc:
        raise version_error(
            VersionErrorCode.INVALID_CONFIG, f"Could not locate the config file at {path}"
        ) from exc
    except (ValueError, OSError) as exc:
        raise version_error(
            VersionErrorCode.INVALID_CONFIG, f"Failed to parse config file {path}: {exc}"
        ) from exc


def parse_config(data: dict[str, Any]) -> VersionConfig:
    """Validate a raw settings mapping."""
    try:
        return VersionConfig.model_validate(data)
    except ValidationError as exc:
        raise version_error(VersionErrorCode.INVALID_CONFIG, str(exc)) from exc


def load_config(path: Path | str | None = None, root: Path | None = None) -> VersionConfig:
    """Load configuration for a run.

    Lookup order:
    1. ``path`` when given (JSON, or TOML with a [tool.monover] table)
    2. ``version.config.json`` in ``root``
    3. ``[tool.monover]`` in ``root``/pyproject.toml
    4. defaults

    Raises:
        VersionError: If a config file cannot be read or fails validation.
    """
    root = root or Path.cwd()

    if path is not None:
        config_path = Path(path)
        log.info("Loaded configuration from %s", config_path)
        return parse_config(_read_config_file(config_path))

    json_path = root / CONFIG_FILENAME
    if json_path.exists():
        log.info("Loaded configuration from %s", json_path)
        return parse_config(_read_config_file(json_path))

    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        data = _read_config_file(pyproject)
        if data:
            log.info("Loaded configuration from [tool.monover] in %s", pyproject)
            return parse_config(data)

    log.info("No configuration file found, using defaults")
    return VersionConfig()
