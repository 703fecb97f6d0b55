"""Transformer that strips active content from chapter markup."""

from __future__ import annotations

from bs4 import BeautifulSoup

from . import TransformContext


class Transformer:
    """Remove scripts, embedded objects and inline event handlers."""

    name = "sanitize"

    _STRIP_SELECTORS = ("script", "style", "iframe", "object", "embed")

    async def transform(self, context: TransformContext) -> str:
        if not context.settings.sanitize_enabled:
            return context.content

        soup = BeautifulSoup(context.content, "html.parser")
        changed = False
        for element in soup.find_all(list(self._STRIP_SELECTORS)):
            element.decompose()
            changed = True

        for element in soup.find_all(True):
            handlers = [attr for attr in element.attrs if attr.lower().startswith("on")]
            for attr in handlers:
                del element[attr]
                changed = True

        # unchanged markup is returned verbatim rather than re-serialized
        return str(soup) if changed else context.content
