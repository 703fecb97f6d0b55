"""Transformer that marks EPUB footnotes for pop-up display."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from . import TransformContext


class Transformer:
    """Tag note references and hide footnote bodies behind ARIA roles."""

    name = "footnote"

    _NOTEREF_TYPES = frozenset({"noteref"})
    _FOOTNOTE_TYPES = frozenset({"footnote", "endnote", "rearnote"})

    async def transform(self, context: TransformContext) -> str:
        if not context.settings.footnote_enabled:
            return context.content

        soup = BeautifulSoup(context.content, "html.parser")
        changed = False
        for anchor in soup.find_all("a"):
            if self._epub_types(anchor) & self._NOTEREF_TYPES and not anchor.get("role"):
                anchor["role"] = "doc-noteref"
                changed = True

        for aside in soup.find_all("aside"):
            if not self._epub_types(aside) & self._FOOTNOTE_TYPES:
                continue
            if not aside.get("role"):
                aside["role"] = "doc-footnote"
                changed = True
            if not aside.has_attr("hidden"):
                aside["hidden"] = ""
                changed = True

        return str(soup) if changed else context.content

    def _epub_types(self, element: Tag) -> set[str]:
        value = element.get("epub:type")
        if not value:
            return set()
        if isinstance(value, str):
            return set(value.lower().split())
        return {str(part).lower() for part in value}
