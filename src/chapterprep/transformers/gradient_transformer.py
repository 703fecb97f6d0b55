"""Gradient reading transformer that shades successive paragraphs.

Each outermost ``<p>`` block receives a structural line token and one of
``PALETTE_SIZE`` shade tokens, cycling in document order. The companion
stylesheet keys on these names:

* ``<prefix>line`` marks every shaded paragraph,
* ``<prefix>l0`` .. ``<prefix>l3`` select the shade,
* ``<prefix>clip`` marks the optional inner wrapper span.

The scanner only understands ``<p>`` open/close tags. Anything it cannot pair
(an unterminated block, a stray ``</p>``) is passed through untouched.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

from . import TransformContext

logger = logging.getLogger(__name__)

PALETTE_SIZE = 4
DEFAULT_PREFIX = "g-"

# open or close tag whose name is exactly "p"
# quoted attribute values may contain ">"
_PARAGRAPH_TAG_RE = re.compile(
    r"""<(/?)p(?=[\s/>])((?:[^>"']|"[^"]*"|'[^']*')*)>""", re.IGNORECASE
)
_CLASS_ATTR_RE = re.compile(
    r"""(\sclass\s*=\s*)(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+))""",
    re.IGNORECASE,
)


def line_token(prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}line"


def shade_token(index: int, prefix: str = DEFAULT_PREFIX) -> str:
    if not 0 <= index < PALETTE_SIZE:
        raise ValueError(f"Shade index {index} outside palette of {PALETTE_SIZE}")
    return f"{prefix}l{index}"


def clip_token(prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}clip"


class Transformer:
    """Attach cyclic shade classes to paragraph blocks."""

    name = "gradient"

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        self.prefix = prefix

    async def transform(self, context: TransformContext) -> str:
        settings = context.settings
        if not settings.gradient_enabled:
            return context.content
        return shade_paragraphs(
            context.content,
            prefix=self.prefix,
            clip=settings.gradient_clip_enabled,
        )


def shade_paragraphs(
    content: str, *, prefix: str = DEFAULT_PREFIX, clip: bool = False
) -> str:
    """Rewrite every outermost paragraph with line and shade classes."""

    pieces: list[str] = []
    cursor = 0
    counter = 0
    for opening, closing in _iter_blocks(content):
        shade = shade_token(counter % PALETTE_SIZE, prefix)
        attrs = _merge_classes(opening.group(2), [line_token(prefix), shade])
        inner = content[opening.end() : closing.start()]
        if clip and not _has_class_token(inner, clip_token(prefix)):
            inner = f'<span class="{clip_token(prefix)} {shade}">{inner}</span>'

        pieces.append(content[cursor : opening.start()])
        pieces.append(f"<{content[opening.start() + 1]}{attrs}>")
        pieces.append(inner)
        pieces.append(closing.group(0))
        cursor = closing.end()
        counter += 1

    if not counter:
        return content

    pieces.append(content[cursor:])
    logger.debug("Shaded %d paragraph(s)", counter)
    return "".join(pieces)


def _iter_blocks(content: str) -> Iterator[tuple[re.Match[str], re.Match[str]]]:
    """Yield (open, close) tag matches of outermost paragraph blocks."""

    depth = 0
    opening: re.Match[str] | None = None
    for match in _PARAGRAPH_TAG_RE.finditer(content):
        if match.group(1):
            if depth == 0:
                continue
            depth -= 1
            if depth == 0 and opening is not None:
                yield opening, match
                opening = None
        else:
            if match.group(2).rstrip().endswith("/"):
                continue
            if depth == 0:
                opening = match
            depth += 1


def _merge_classes(attrs: str, tokens: list[str]) -> str:
    """Append tokens to the class attribute, creating it when absent.

    A paragraph that already lists every token is left alone so that shading
    its own output again is a no-op. Otherwise all tokens are appended after
    the existing ones, even if some of them already appear.
    """

    match = _CLASS_ATTR_RE.search(attrs)
    if match is None:
        return f'{attrs} class="{" ".join(tokens)}"'

    existing = _class_value(match)
    present = existing.split()
    if all(token in present for token in tokens):
        return attrs

    merged = " ".join(tokens)
    if existing.strip():
        merged = f"{existing.rstrip()} {merged}"
    quote = "'" if match.group(3) is not None else '"'
    replacement = f"{match.group(1)}{quote}{merged}{quote}"
    return attrs[: match.start()] + replacement + attrs[match.end() :]


def _class_value(match: re.Match[str]) -> str:
    for group in (2, 3, 4):
        if match.group(group) is not None:
            return match.group(group)
    return ""


def _has_class_token(markup: str, token: str) -> bool:
    """Return True when any element in markup lists token in its class."""

    return any(
        token in _class_value(match).split()
        for match in _CLASS_ATTR_RE.finditer(markup)
    )
