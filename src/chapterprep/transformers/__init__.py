"""Transformer contract and loader utilities."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from importlib import import_module
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Protocol

from ..settings import ViewSettings

ProgressCallback = Callable[[int, int, Path, bool], None]

DEFAULT_ORDER = (
    "sanitize_transformer",
    "punctuation_transformer",
    "footnote_transformer",
    "language_transformer",
    "whitespace_transformer",
    "gradient_transformer",
)


@dataclass(frozen=True, slots=True)
class TransformContext:
    """Content and settings handed to one transformer invocation."""

    content: str
    settings: ViewSettings
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def with_content(self, content: str) -> TransformContext:
        """Return a fresh context for the next stage."""

        return replace(self, content=content)


class Transformer(Protocol):
    """Transformer interface."""

    name: str

    async def transform(self, context: TransformContext) -> str: ...


def load_transformer(name: str) -> Transformer:
    """Instantiate a transformer implementation."""

    module_path = f"{__name__}.{name}"
    module = import_module(module_path)
    transformer_cls = getattr(module, "Transformer", None)
    if transformer_cls is None:
        raise ImportError(f"Transformer module '{name}' missing Transformer class")
    return transformer_cls()


def available_transformers() -> list[Transformer]:
    """Fresh instances of every built-in transformer, in pipeline order."""

    return [load_transformer(name) for name in DEFAULT_ORDER]
