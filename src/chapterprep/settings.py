"""View settings consumed by the transformers."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Sequence

from .errors import ConfigurationError

# camelCase keys used by the reader's settings store
_KEY_ALIASES = {
    "gradientEnabled": "gradient_enabled",
    "gradientReadingEnabled": "gradient_enabled",
    "gradientClipEnabled": "gradient_clip_enabled",
    "sanitizeEnabled": "sanitize_enabled",
    "replaceQuotationMarks": "replace_quotation_marks",
    "footnoteEnabled": "footnote_enabled",
    "collapseWhitespace": "collapse_whitespace",
    "contentLanguage": "content_language",
}
_STRING_FIELDS = frozenset({"content_language"})


@dataclass(frozen=True, slots=True)
class ViewSettings:
    """Feature flags for one pipeline run. Absent flags are disabled."""

    gradient_enabled: bool = False
    gradient_clip_enabled: bool = False
    sanitize_enabled: bool = False
    replace_quotation_marks: bool = False
    footnote_enabled: bool = False
    collapse_whitespace: bool = False
    content_language: str | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> ViewSettings:
        """Build settings from a loosely-typed mapping, validating each value."""

        if values is None:
            return cls()
        if not isinstance(values, Mapping):
            raise ConfigurationError(
                f"Settings must be a mapping, got {type(values).__name__}"
            )

        known = {field.name for field in fields(cls)}
        collected: dict[str, Any] = {}
        for key, value in values.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                continue
            collected[name] = _coerce(name, value)
        return cls(**collected)

    def merged(self, overrides: Mapping[str, Any]) -> ViewSettings:
        """Return a copy with the given snake_case fields replaced."""

        updates = {name: _coerce(name, value) for name, value in overrides.items()}
        return replace(self, **updates)


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None if name in _STRING_FIELDS else False
    if name in _STRING_FIELDS:
        if not isinstance(value, str):
            raise ConfigurationError(
                f"Setting '{name}' must be a string, got {type(value).__name__}"
            )
        return value.strip() or None
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Setting '{name}' must be a boolean, got {value!r}"
        )
    return value


def load_settings(path: Path | str) -> ViewSettings:
    """Load settings from a JSON file."""

    settings_path = Path(path)
    try:
        text = settings_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read settings file {settings_path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {settings_path}: {exc}") from exc
    return ViewSettings.from_mapping(data)


@dataclass(slots=True)
class CliOptions:
    """Structured representation of CLI arguments."""

    source: Path
    settings: ViewSettings
    output: Path | None = None
    inspect: bool = False
    verbose: bool = False
    quiet: bool = False


def parse_cli_args(argv: Sequence[str] | None = None) -> CliOptions:
    """Parse CLI arguments into a dataclass."""

    parser = argparse.ArgumentParser(
        prog="chapterprep",
        description="Prepare e-book chapter markup for display.",
    )
    parser.add_argument(
        "--settings",
        help="JSON settings file; explicit flags override its values.",
    )
    parser.add_argument(
        "--gradient",
        action="store_true",
        help="Shade paragraphs with the gradient reading palette.",
    )
    parser.add_argument(
        "--gradient-clip",
        action="store_true",
        help="Also wrap paragraph content in a clip span (implies --gradient).",
    )
    parser.add_argument(
        "--sanitize",
        action="store_true",
        help="Strip scripts, styles and event handler attributes.",
    )
    parser.add_argument(
        "--quotes",
        action="store_true",
        help="Replace straight quotation marks with typographic ones.",
    )
    parser.add_argument(
        "--footnotes",
        action="store_true",
        help="Mark EPUB footnotes and note references for pop-up display.",
    )
    parser.add_argument(
        "--collapse-whitespace",
        action="store_true",
        help="Collapse runs of whitespace between and inside text.",
    )
    parser.add_argument(
        "--lang",
        help="Language tag to set on the document when it has none.",
    )
    parser.add_argument(
        "--inspect",
        action="store_true",
        help="Report gradient classes found in SOURCE instead of transforming.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file or directory; defaults to stdout for a single file.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output (errors only).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show per-file progress.",
    )
    parser.add_argument(
        "source",
        help="Markup file or directory of chapter files.",
    )

    args = parser.parse_args(argv)

    if args.quiet and args.verbose:
        parser.error("--quiet and --verbose cannot be combined.")

    try:
        settings = load_settings(args.settings) if args.settings else ViewSettings()
    except ConfigurationError as exc:
        parser.error(str(exc))

    overrides: dict[str, Any] = {}
    if args.gradient or args.gradient_clip:
        overrides["gradient_enabled"] = True
    if args.gradient_clip:
        overrides["gradient_clip_enabled"] = True
    if args.sanitize:
        overrides["sanitize_enabled"] = True
    if args.quotes:
        overrides["replace_quotation_marks"] = True
    if args.footnotes:
        overrides["footnote_enabled"] = True
    if args.collapse_whitespace:
        overrides["collapse_whitespace"] = True
    if args.lang:
        overrides["content_language"] = args.lang

    return CliOptions(
        source=Path(args.source),
        settings=settings.merged(overrides),
        output=Path(args.output) if args.output else None,
        inspect=args.inspect,
        verbose=args.verbose,
        quiet=args.quiet,
    )
