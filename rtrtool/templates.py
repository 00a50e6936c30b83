"""Built-in export templates and lookup of user supplied template files."""

from __future__ import annotations

import os

__all__ = [
    "DEFAULT_TEMPLATE_NAME",
    "TEMPLATES",
    "TemplateError",
    "describe_templates",
    "get_template",
    "template_names",
]

DEFAULT_TEMPLATE_NAME = "default"

TEMPLATES: dict[str, str] = {
    "default": (
        "{{#roas}}\n"
        "{{prefix}}/{{length}}-{{maxlen}} AS {{origin}}\n"
        "{{/roas}}\n "
    ),
    "csv": (
        "{{#roas}}\n"
        "{{prefix}}, {{length}}, {{maxlen}}, {{origin}}\n"
        "{{/roas}}\n "
    ),
    "csvwithheader": (
        "prefix, minlen, maxlen, asn\n"
        "{{#roas}}\n"
        "{{prefix}}, {{length}}, {{maxlen}}, {{origin}}\n"
        "{{/roas}}\n "
    ),
    "json": (
        "[\n"
        "{{#roas}}\n"
        "\t{\n"
        '\t\t"prefix": "{{prefix}}",\n'
        '\t\t"length": "{{length}}",\n'
        '\t\t"maxlen": "{{maxlen}}",\n'
        '\t\t"origin": "{{origin}}"\n'
        "\t}{{^last}},{{/last}}\n"
        "{{/roas}}\n"
        "]\n "
    ),
}


class TemplateError(Exception):
    """Raised when a template can be neither found nor read."""


def _is_readable_file(path: str) -> bool:
    return os.access(path, os.R_OK) and os.path.isfile(path)


def template_names() -> list[str]:
    """Return the names of the built-in templates in their fixed order."""
    return list(TEMPLATES)


def get_template(name: str) -> str:
    """Return a built-in template by name, or the contents of a readable file."""
    if name in TEMPLATES:
        return TEMPLATES[name]

    if _is_readable_file(name):
        try:
            with open(name, encoding="utf-8") as handle:
                return handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateError("Could not read template") from exc

    raise TemplateError(f'Template "{name}" not found')


def describe_templates(template_name: str | None) -> str:
    """Return the text listing the built-in templates.

    Without a name, every template name is listed on its own line. With a
    name, the body of the matching built-in template is returned, or an empty
    string when no built-in template has that name.
    """
    if template_name is None:
        return "".join(f"{name}\n" for name in TEMPLATES)
    return TEMPLATES.get(template_name, "")