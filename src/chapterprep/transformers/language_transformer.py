"""Transformer that declares the content language on the document root."""

from __future__ import annotations

from bs4 import BeautifulSoup

from . import TransformContext


class Transformer:
    """Set ``lang`` on ``<html>`` (or ``<body>``) when the book omits it."""

    name = "language"

    async def transform(self, context: TransformContext) -> str:
        language = context.settings.content_language
        if not language:
            return context.content

        soup = BeautifulSoup(context.content, "html.parser")
        root = soup.find("html") or soup.find("body")
        if root is None or root.get("lang"):
            return context.content

        root["lang"] = language
        return str(soup)
