"""Latest tag resolution.

Finds the tag that represents the current release of the repository (global
scope) or of one package (package scope). Selection is semantic: the highest
version wins even when a lower tag was created later, e.g. a hotfix tag
v1.0.5 pushed after v1.2.0.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from . import git
from .errors import GitError, NoTagsFoundError
from .formatting import DEFAULT_TAG_TEMPLATE
from .models import ResolvedTag
from .versions import clean_version, parse_version

log = logging.getLogger(__name__)

# Tried in order for package-scoped tags; the first convention with a
# parseable match wins.
PACKAGE_TAG_CONVENTIONS: tuple[str, ...] = (
    "${packageName}@${prefix}${version}",
    "${prefix}${packageName}@${version}",
    "${packageName}@${version}",
)

_VERSION_GROUP = r"(?P<version>\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)"


def template_regex(
    template: str, package_name: str | None = None, prefix: str | None = None
) -> re.Pattern[str]:
    """Turn a tag template into an anchored regex capturing the version.

    Literal text in the template, the package name and the prefix are all
    escaped, so names such as ``@scope/pkg.js`` match literally.
    """
    pattern = re.escape(template)
    pattern = pattern.replace(re.escape("${version}"), _VERSION_GROUP, 1)
    pattern = pattern.replace(re.escape("${version}"), r"[^@]+")
    pattern = pattern.replace(re.escape("${prefix}"), re.escape(prefix or ""))
    pattern = pattern.replace(re.escape("${packageName}"), re.escape(package_name or ""))
    return re.compile(rf"^{pattern}$")


def extract_tag_version(
    raw_tag: str, package_name: str | None = None, prefix: str | None = None
) -> str | None:
    """Extract the cleaned semver version from a tag name.

    Global tags are matched as ``prefix + version``. Package tags are tried
    against each naming convention in turn.

    Examples:
        ("v1.2.3", None, "v") → "1.2.3"
        ("pkg@v1.2.3", "pkg", "v") → "1.2.3"
        ("vpkg@1.2.3", "pkg", "v") → "1.2.3"
        ("other@1.2.3", "pkg", "v") → None
    """
    templates = PACKAGE_TAG_CONVENTIONS if package_name else (DEFAULT_TAG_TEMPLATE,)
    for template in templates:
        version = _match_version(template_regex(template, package_name, prefix), raw_tag)
        if version:
            return version
    return None


def _match_version(regex: re.Pattern[str], raw_tag: str) -> str | None:
    match = regex.match(raw_tag)
    return clean_version(match.group("version")) if match else None


def _collect(tags: Sequence[str], regex: re.Pattern[str]) -> list[ResolvedTag]:
    return [
        ResolvedTag(raw_tag=tag, cleaned_version=version)
        for tag in tags
        if (version := _match_version(regex, tag))
    ]


def _semantic_latest(candidates: list[ResolvedTag]) -> ResolvedTag:
    """Pick the highest version; ``candidates`` are newest first."""
    latest = max(candidates, key=lambda t: parse_version(t.cleaned_version or "0.0.0"))
    chronological = candidates[0]
    if latest.raw_tag != chronological.raw_tag:
        log.debug(
            "Tag ordering differs: chronological latest is %s, semantic latest is %s",
            chronological.raw_tag,
            latest.raw_tag,
        )
        log.info(
            "Using semantic latest (%s) to handle out-of-order tag creation",
            latest.raw_tag,
        )
    return latest


def resolve_latest_tag(
    package_name: str | None = None,
    version_prefix: str | None = None,
    *,
    package_specific_tags: bool = False,
    tag_template: str | None = None,
) -> ResolvedTag | None:
    """Find the latest release tag for the repository or a package.

    Args:
        package_name: Package to resolve for. None resolves global tags.
        version_prefix: Prefix in front of the version, e.g. "v".
        package_specific_tags: Package tags are only looked up when set;
            otherwise package scope returns None and callers fall back to
            global tags.
        tag_template: Package tag template tried before the built-in
            naming conventions.

    Returns:
        The semantically highest matching tag, or None when there is none.
        Git failures are absorbed and reported as None.
    """
    if package_name and not package_specific_tags:
        log.debug(
            "Package-specific tags disabled for %s, falling back to global tags",
            package_name,
        )
        return None

    try:
        tags = git.list_semver_tags(None if package_name else version_prefix)
    except NoTagsFoundError:
        log.info("No tags found in the repository.")
        return None
    except GitError as exc:
        log.warning("Failed to get latest tag: %s", exc.message)
        return None

    log.debug("Retrieved %d tags: %s", len(tags), ", ".join(tags))

    if not package_name:
        candidates = _collect(tags, template_regex(DEFAULT_TAG_TEMPLATE, None, version_prefix))
        if not candidates:
            log.debug("No semver tags found with prefix %r", version_prefix or "")
            return None
        return _semantic_latest(candidates)

    templates = ([tag_template] if tag_template else []) + [
        t for t in PACKAGE_TAG_CONVENTIONS if t != tag_template
    ]
    for template in templates:
        regex = template_regex(template, package_name, version_prefix)
        log.debug("Trying package tag pattern %s", regex.pattern)
        candidates = _collect(tags, regex)
        if candidates:
            log.debug("Found %d package tags for %s", len(candidates), package_name)
            latest = _semantic_latest(candidates)
            return latest.model_copy(update={"package_scope": package_name})

    if tags:
        log.debug(
            "Found %d tags, but none match the naming convention for package %s",
            len(tags),
            package_name,
        )
    else:
        log.debug("No semver tags exist in the repository")
    return None
