"""Transformer that collapses redundant whitespace in chapter markup."""

from __future__ import annotations

import re

from . import TransformContext

_PRE_BLOCK_RE = re.compile(r"(<pre\b[^>]*>.*?</pre\s*>)", re.IGNORECASE | re.DOTALL)
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}|[\t\r\n]")


class Transformer:
    """Collapse whitespace runs to one space, leaving ``<pre>`` blocks verbatim."""

    name = "whitespace"

    async def transform(self, context: TransformContext) -> str:
        if not context.settings.collapse_whitespace:
            return context.content

        parts = _PRE_BLOCK_RE.split(context.content)
        # split() with one group puts <pre> blocks at odd indexes
        for index in range(0, len(parts), 2):
            parts[index] = _WHITESPACE_RUN_RE.sub(" ", parts[index])
        return "".join(parts)
