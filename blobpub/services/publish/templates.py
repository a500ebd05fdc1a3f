"""
Template resolution for target configuration.

build_template_context() turns a ReleaseContext into the named values a
template may reference. render_template() is the default renderer: it
understands field lookups such as ``{{ .Tag }}`` and ``{{ .Env.BUCKET }}``
and nothing else. Any renderer with the same call shape can be passed to
the Publisher instead.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ...core.exceptions import TemplateError
from ...core.models.release import ReleaseContext

_ACTION = re.compile(r"\{\{-?\s*(.*?)\s*-?\}\}", re.DOTALL)
_FIELD = re.compile(r"^\.([A-Za-z_]\w*)(?:\.([A-Za-z_]\w*))?$")
_SEMVER = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)")


def build_template_context(release: ReleaseContext) -> dict[str, Any]:
    """
    Build the values visible to configuration templates.

    Args:
        release: Release being published

    Returns:
        Mapping of field name to value; ``Env`` is itself a mapping
    """
    tag = release.current_tag
    version = tag[1:] if tag.startswith("v") else tag
    semver = _SEMVER.match(tag)
    major, minor, patch = semver.groups() if semver else ("", "", "")
    return {
        "ProjectName": release.project_name,
        "Tag": tag,
        "Version": version,
        "Major": major,
        "Minor": minor,
        "Patch": patch,
        "Commit": release.commit,
        "ShortCommit": release.commit[:7],
        "Date": release.date.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "Timestamp": str(int(release.date.timestamp())),
        "Env": release.env,
    }


def _evaluate(expression: str, template: str, context: Mapping[str, Any]) -> str:
    match = _FIELD.match(expression)
    if match is None:
        raise TemplateError(
            f"unsupported template expression: {{{{ {expression} }}}}",
            template=template,
            reference=expression,
        )

    name, key = match.groups()
    if name not in context:
        raise TemplateError(
            f"template references unknown field .{name}",
            template=template,
            reference=f".{name}",
        )
    value = context[name]

    if key is None:
        if isinstance(value, Mapping):
            raise TemplateError(
                f"field .{name} is a map; reference one of its keys",
                template=template,
                reference=f".{name}",
            )
        return str(value)

    if not isinstance(value, Mapping):
        raise TemplateError(
            f"field .{name} has no key {key}",
            template=template,
            reference=f".{name}.{key}",
        )
    if key not in value:
        raise TemplateError(
            f"map has no entry for key {key}",
            template=template,
            reference=f".{name}.{key}",
        )
    return str(value[key])


def render_template(template: str, context: Mapping[str, Any]) -> str:
    """
    Render field lookups in a template string.

    Strings without ``{{`` are returned unchanged. Evaluation is all or
    nothing: the first unresolved reference raises and no partially
    rendered string escapes.

    Args:
        template: Template string
        context: Values from build_template_context()

    Returns:
        Rendered string

    Raises:
        TemplateError: For unknown fields, missing environment variables,
            unsupported expressions or an unterminated action
    """
    if "{{" not in template:
        return template

    parts: list[str] = []
    pos = 0
    for match in _ACTION.finditer(template):
        parts.append(template[pos : match.start()])
        parts.append(_evaluate(match.group(1), template, context))
        pos = match.end()

    rest = template[pos:]
    if "{{" in rest:
        raise TemplateError("unterminated template action", template=template)
    parts.append(rest)
    return "".join(parts)
