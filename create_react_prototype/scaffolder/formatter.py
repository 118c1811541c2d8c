"""Placeholder substitution for scaffolding templates.

Templates contain bracketed tokens such as ``[name]`` or ``[name/json]``.
Each token whose key is present in the argument mapping is replaced by its
value; unknown tokens (``[yyyy]`` in some license texts, markdown links,
...) are left exactly as they are.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

TemplateArgs = Mapping[str, str]

_PLACEHOLDER_RE = re.compile(r"\[([^\[\]\r\n]+)\]")

JSON_SUFFIX = "/json"


def format_template(text: str, args: TemplateArgs) -> str:
    """Replace every ``[key]`` in *text* with ``args[key]``.

    Substitution is a single pass, so a value that itself looks like a
    placeholder is inserted literally and never expanded.
    """

    def _replace(match: re.Match[str]) -> str:
        return args.get(match.group(1), match.group(0))

    return _PLACEHOLDER_RE.sub(_replace, text)


def json_escape(value: str) -> str:
    """Escape *value* for use inside a JSON string literal (no quotes)."""
    return json.dumps(value, ensure_ascii=False)[1:-1]


def with_json_variants(values: Mapping[str, Any]) -> dict[str, str]:
    """Coerce *values* to strings and add a ``<key>/json`` twin for each.

    ``None`` becomes the empty string, so every key is always usable in a
    template.
    """
    args: dict[str, str] = {}
    for key, value in values.items():
        text = "" if value is None else str(value)
        args[key] = text
        args[key + JSON_SUFFIX] = json_escape(text)
    return args
