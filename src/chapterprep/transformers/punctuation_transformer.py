"""Transformer that replaces straight quotation marks in text."""

from __future__ import annotations

import re

from . import TransformContext

# text runs between tags; tags themselves are never touched
_TEXT_RUN_RE = re.compile(r"(?<=>)[^<]+|^[^<]+")
# comments and raw-text elements keep their quotes
_RAW_BLOCK_RE = re.compile(
    r"(<!--.*?-->|<script\b.*?</script\s*>|<style\b.*?</style\s*>)",
    re.IGNORECASE | re.DOTALL,
)
_OPENING_CONTEXT = re.compile(r"(^|[\s(\[{“‘—–-])$")


class Transformer:
    """Turn ``"`` and ``'`` into typographic quotes outside of markup."""

    name = "punctuation"

    async def transform(self, context: TransformContext) -> str:
        if not context.settings.replace_quotation_marks:
            return context.content
        parts = _RAW_BLOCK_RE.split(context.content)
        # split() with one group puts raw blocks at odd indexes
        for index in range(0, len(parts), 2):
            parts[index] = _TEXT_RUN_RE.sub(_curl_match, parts[index])
        return "".join(parts)


def _curl_match(match: re.Match[str]) -> str:
    return _curl(match.group(0))


def _curl(text: str) -> str:
    if '"' not in text and "'" not in text:
        return text

    result: list[str] = []
    for char in text:
        if char not in "\"'":
            result.append(char)
            continue
        previous = result[-1] if result else ""
        opening = bool(_OPENING_CONTEXT.search(previous))
        if char == '"':
            result.append("“" if opening else "”")
        else:
            result.append("‘" if opening else "’")
    return "".join(result)
