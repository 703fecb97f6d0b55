"""Read-only inspection of gradient classes in transformed markup.

These helpers never feed back into the pipeline; they exist so a human can
check which paragraphs carry which shade, and spot paragraphs that were missed
or wrapped twice.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from .transformers.gradient_transformer import (
    DEFAULT_PREFIX,
    PALETTE_SIZE,
    clip_token,
    line_token,
)

_PREVIEW_LENGTH = 50
_MATCH_LENGTH = 30


@dataclass(slots=True)
class GradientBlockInfo:
    """Gradient state of one paragraph."""

    tag_name: str
    classes: list[str]
    shades: list[int]
    clip_wrappers: int
    has_text: bool
    text_preview: str

    @property
    def shade(self) -> int | None:
        return self.shades[0] if len(self.shades) == 1 else None


@dataclass(slots=True)
class GradientDifference:
    text_preview: str
    working: GradientBlockInfo
    broken: GradientBlockInfo
    differences: list[str] = field(default_factory=list)


def inspect_gradient(markup: str, *, prefix: str = DEFAULT_PREFIX) -> list[GradientBlockInfo]:
    """Describe every paragraph in markup."""

    shade_re = re.compile(rf"^{re.escape(prefix)}l(\d+)$")
    clip = clip_token(prefix)
    soup = BeautifulSoup(markup, "html.parser")

    results: list[GradientBlockInfo] = []
    for paragraph in soup.find_all("p"):
        classes = _class_list(paragraph)
        shades = [
            int(match.group(1))
            for match in (shade_re.match(token) for token in classes)
            if match and int(match.group(1)) < PALETTE_SIZE
        ]
        wrappers = [
            element
            for element in paragraph.find_all(True)
            if clip in _class_list(element)
        ]
        text = paragraph.get_text(" ", strip=True)
        results.append(
            GradientBlockInfo(
                tag_name=paragraph.name,
                classes=classes,
                shades=shades,
                clip_wrappers=len(wrappers),
                has_text=bool(text),
                text_preview=text[:_PREVIEW_LENGTH],
            )
        )
    return results


def find_problems(
    infos: list[GradientBlockInfo], *, prefix: str = DEFAULT_PREFIX
) -> list[str]:
    """Return human-readable descriptions of suspicious paragraphs."""

    marker = line_token(prefix)
    problems: list[str] = []
    for position, info in enumerate(infos, start=1):
        label = f"paragraph {position} ({info.text_preview[:_MATCH_LENGTH]!r})"
        if not info.shades:
            problems.append(f"{label}: no shade class")
        elif len(info.shades) > 1:
            problems.append(f"{label}: {len(info.shades)} shade classes")
        if info.shades and marker not in info.classes:
            problems.append(f"{label}: missing {marker}")
        if info.clip_wrappers > 1:
            problems.append(f"{label}: {info.clip_wrappers} clip wrappers")
    return problems


def compare_gradient(
    working: str, broken: str, *, prefix: str = DEFAULT_PREFIX
) -> list[GradientDifference]:
    """Pair paragraphs by their text and report class differences."""

    working_infos = inspect_gradient(working, prefix=prefix)
    broken_infos = inspect_gradient(broken, prefix=prefix)

    differences: list[GradientDifference] = []
    for item in working_infos:
        key = item.text_preview[:_MATCH_LENGTH]
        matching = next(
            (
                other
                for other in broken_infos
                if other.tag_name == item.tag_name
                and other.text_preview[:_MATCH_LENGTH] == key
            ),
            None,
        )
        if matching is None:
            continue

        diffs: list[str] = []
        if item.classes != matching.classes:
            diffs.append(
                f'classes: working="{" ".join(item.classes)}" '
                f'vs broken="{" ".join(matching.classes)}"'
            )
        if item.clip_wrappers != matching.clip_wrappers:
            diffs.append(
                f"clip wrappers: working={item.clip_wrappers} vs broken={matching.clip_wrappers}"
            )
        if diffs:
            differences.append(
                GradientDifference(
                    text_preview=key,
                    working=item,
                    broken=matching,
                    differences=diffs,
                )
            )
    return differences


def summarize(infos: list[GradientBlockInfo], *, prefix: str = DEFAULT_PREFIX) -> list[str]:
    """Summary lines for the CLI."""

    lines = [f"Paragraphs found: {len(infos)}"]
    counts = [0] * PALETTE_SIZE
    for info in infos:
        if info.shade is not None:
            counts[info.shade] += 1
    for index, count in enumerate(counts):
        lines.append(f"  {prefix}l{index}: {count}")
    problems = find_problems(infos, prefix=prefix)
    if problems:
        lines.append(f"Problems: {len(problems)}")
        lines.extend(f"  - {problem}" for problem in problems)
    return lines


def _class_list(element: Tag) -> list[str]:
    value = element.get("class")
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(part) for part in value]
