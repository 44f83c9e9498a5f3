"""Tag name and commit message formatting.

Templates use ``${name}`` placeholders. Unknown placeholders are left in
place so a partially rendered template is easy to spot in logs.
"""

from __future__ import annotations

import re
from string import Template

DEFAULT_TAG_TEMPLATE = "${prefix}${version}"
DEFAULT_PACKAGE_TAG_TEMPLATE = "${packageName}@${prefix}${version}"

_PLACEHOLDER = re.compile(r"\$\{\w+\}")


def render_template(template: str, **values: str | None) -> str:
    """Substitute ``${key}`` placeholders; None values are skipped."""
    return Template(template).safe_substitute(
        {k: v for k, v in values.items() if v is not None}
    )


def has_placeholders(template: str) -> bool:
    return bool(_PLACEHOLDER.search(template))


def format_tag(
    version: str,
    prefix: str = "",
    package_name: str | None = None,
    *,
    tag_template: str = DEFAULT_TAG_TEMPLATE,
    package_tag_template: str = DEFAULT_PACKAGE_TAG_TEMPLATE,
) -> str:
    """Build a tag name for ``version``.

    Examples:
        format_tag("1.2.0", "v") → "v1.2.0"
        format_tag("1.2.0", "v", "@scope/pkg") → "@scope/pkg@v1.2.0"
    """
    template = package_tag_template if package_name else tag_template
    return render_template(
        template, version=version, prefix=prefix or "", packageName=package_name
    )


def format_commit_message(
    template: str, version: str, package_name: str | None = None
) -> str:
    return render_template(template, version=version, packageName=package_name)


def format_release_message(versions: dict[str, str]) -> str:
    """Default commit message for a batch of released packages.

    Examples:
        {"a": "0.2.0", "b": "0.2.0"} → "chore(release): a, b 0.2.0"
        {"a": "1.2.0", "b": "0.3.0"} → "chore(release): a@1.2.0, b@0.3.0"
    """
    distinct = set(versions.values())
    if len(distinct) == 1:
        return f"chore(release): {', '.join(versions)} {distinct.pop()}"
    return "chore(release): " + ", ".join(f"{n}@{v}" for n, v in versions.items())
