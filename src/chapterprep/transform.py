"""Transform pipeline orchestration."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Sequence

from .errors import TransformError
from .settings import ViewSettings
from .transformers import (
    ProgressCallback,
    TransformContext,
    Transformer,
    available_transformers,
)

logger = logging.getLogger(__name__)

MARKUP_SUFFIXES = (".html", ".htm", ".xhtml")

ErrorCallback = Callable[[TransformError], None]


class Pipeline:
    """Fixed, ordered sequence of transformers applied to one context."""

    def __init__(self, transformers: Iterable[Transformer] | None = None) -> None:
        if transformers is None:
            transformers = available_transformers()
        stages = tuple(transformers)
        names = [stage.name for stage in stages]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate transformer name(s): {', '.join(duplicates)}")
        self._transformers = stages

    @property
    def transformers(self) -> tuple[Transformer, ...]:
        return self._transformers

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self._transformers)

    async def run(self, context: TransformContext) -> str:
        """Thread the content through every stage and return the result.

        The first failing stage aborts the run. Errors are raised as
        :class:`TransformError` carrying the stage name; nothing is returned
        for a partially processed document.
        """

        current = context
        for stage in self._transformers:
            logger.debug("Running transformer %s", stage.name)
            try:
                result = await stage.transform(current)
            except TransformError as exc:
                if exc.stage is None:
                    exc.stage = stage.name
                raise
            except Exception as exc:
                raise TransformError(
                    f"Transformer '{stage.name}' failed: {exc}", stage=stage.name
                ) from exc

            if not isinstance(result, str):
                raise TransformError(
                    f"Transformer '{stage.name}' returned {type(result).__name__}, expected str",
                    stage=stage.name,
                )
            current = current.with_content(result)
        return current.content

    async def run_or_passthrough(
        self,
        context: TransformContext,
        *,
        on_error: ErrorCallback | None = None,
    ) -> str:
        """Run the pipeline, falling back to the untransformed content on failure."""

        try:
            return await self.run(context)
        except TransformError as exc:
            logger.warning("Pipeline failed in stage %s: %s", exc.stage, exc)
            if on_error:
                on_error(exc)
            return context.content

    def run_sync(
        self,
        content: str,
        settings: ViewSettings,
        *,
        metadata: dict[str, object] | None = None,
    ) -> str:
        """Blocking wrapper around :meth:`run` for callers outside an event loop."""

        context = TransformContext(content=content, settings=settings, metadata=metadata or {})
        return asyncio.run(self.run(context))


def run_transform_phase(
    settings: ViewSettings,
    source_dir: Path,
    output_dir: Path,
    *,
    pipeline: Pipeline | None = None,
    progress_callback: ProgressCallback | None = None,
) -> list[Path]:
    """Transform every markup file in source_dir into output_dir."""

    source_dir = Path(source_dir)
    output_dir = Path(output_dir)
    if not source_dir.is_dir():
        raise FileNotFoundError(f"Missing chapter directory at {source_dir}.")

    output_dir.mkdir(parents=True, exist_ok=True)
    log_file = output_dir / "transform.log"
    active = pipeline or Pipeline()

    files = list_markup_files(source_dir)
    total = len(files)
    generated: list[Path] = []
    for index, source_path in enumerate(files, start=1):
        destination = output_dir / source_path.name
        content = source_path.read_text(encoding="utf-8")
        failures: list[TransformError] = []
        context = TransformContext(
            content=content,
            settings=settings,
            metadata={"source": str(source_path)},
        )
        result = asyncio.run(active.run_or_passthrough(context, on_error=failures.append))
        for failure in failures:
            _log_failure(log_file, source_path, failure)
        destination.write_text(result, encoding="utf-8")
        generated.append(destination)
        if progress_callback:
            progress_callback(index, total, destination, bool(failures))

    return generated


def list_markup_files(source_dir: Path) -> list[Path]:
    """Return chapter files in a stable order."""

    return sorted(
        path
        for path in Path(source_dir).iterdir()
        if path.is_file() and path.suffix.lower() in MARKUP_SUFFIXES
    )


def _log_failure(log_file: Path, source_path: Path, exc: TransformError) -> None:
    timestamp = datetime.now().isoformat(timespec="seconds")
    message = f"{timestamp} ERROR {source_path.name} [{exc.stage}] -> {exc}\n"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with log_file.open("a", encoding="utf-8") as handle:
        handle.write(message)


def transform_markup(
    content: str,
    settings: ViewSettings,
    *,
    transformers: Sequence[Transformer] | None = None,
) -> str:
    """Run the default (or given) pipeline over one markup string."""

    return Pipeline(transformers).run_sync(content, settings)
