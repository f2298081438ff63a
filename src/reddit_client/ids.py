"""Helpers for Reddit identifiers."""

from __future__ import annotations

import re

_CONTEXT_PATTERNS = (re.compile(r"/r/[^/]*/comments/([^/]*)/.*"),)


def split_id(fullname: str) -> tuple[str, str]:
    """Split a fullname such as ``t1_abc123`` into ``("t1", "abc123")``.

    Anything without exactly one underscore yields ``("", "")``.
    """

    parts = fullname.split("_")
    if len(parts) == 2:
        return parts[0], parts[1]
    return "", ""


def post_id_from_context(context: str) -> str:
    """Return the post id embedded in a ``/r/<sub>/comments/<id>/...`` path."""

    for pattern in _CONTEXT_PATTERNS:
        match = pattern.search(context)
        if match:
            return match.group(1)
    return ""
