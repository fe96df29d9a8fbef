"""Inflection helpers for model, field and resource names.

``EmailSignups`` → ``email_signups`` (underscore), ``emailSignups``
(variable); ``first_name`` → ``First Name`` (humanize).
"""

from __future__ import annotations

import re
from typing import Final

_CAMEL_BOUNDARY: Final = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS: Final = re.compile(r"[\s_\-]+")


def underscore(name: str) -> str:
    """``EmailSignups`` → ``email_signups``."""
    value = _CAMEL_BOUNDARY.sub("_", name.strip())
    return _SEPARATORS.sub("_", value).lower()


def camelize(name: str) -> str:
    """``email_signups`` → ``EmailSignups``."""
    return "".join(part.capitalize() for part in underscore(name).split("_") if part)


def variable(name: str) -> str:
    """``EmailSignups`` → ``emailSignups`` (view-variable convention)."""
    camel = camelize(name)
    return camel[:1].lower() + camel[1:]


def humanize(name: str) -> str:
    """``first_name`` → ``First Name``; ``SourceType`` → ``Source Type``."""
    words = [w for w in underscore(name).split("_") if w]
    return " ".join(w.capitalize() for w in words)


__all__ = ["camelize", "humanize", "underscore", "variable"]
