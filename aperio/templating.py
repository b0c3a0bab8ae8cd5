"""Placeholder substitution and template lookup."""

from __future__ import annotations

import re
from typing import Mapping, TypeVar

T = TypeVar("T")

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def build_prompt(template: str, variables: Mapping[str, object]) -> str:
    """Replace ``{name}`` tokens found in ``variables``.

    Unknown tokens stay verbatim and nothing checks that every variable was
    used, so ``build_prompt(t, {})`` always returns ``t``.
    """
    if not variables:
        return template

    def _sub(match: re.Match) -> str:
        name = match.group(1)
        if name in variables:
            return str(variables[name])
        return match.group(0)

    return _PLACEHOLDER.sub(_sub, template)


def select_template(table: Mapping[str, T], key: str, fallback_key: str) -> T:
    """Static lookup by key with a fixed fallback entry."""
    if key in table:
        return table[key]
    return table[fallback_key]


def humanize(identifier: str) -> str:
    """``marketPulse`` -> ``Market Pulse``, ``key_takeaway`` -> ``key takeaway``."""
    if "_" in identifier:
        return identifier.replace("_", " ")
    spaced = re.sub(r"(?<!^)([A-Z])", r" \1", identifier)
    return spaced[:1].upper() + spaced[1:]
