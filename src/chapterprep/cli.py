"""Command-line interface for chapterprep."""

from __future__ import annotations

import asyncio
import sys
import warnings
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from . import diagnostics
from .errors import TransformError
from .settings import CliOptions, parse_cli_args
from .transform import Pipeline, list_markup_files, run_transform_phase
from .transformers import ProgressCallback, TransformContext


class Console:
    """Status reporting on stderr; stdout is reserved for markup and reports."""

    def __init__(self, *, quiet: bool = False, verbose: bool = False) -> None:
        self.quiet = quiet
        self.verbose = verbose and not quiet

    def info(self, message: str) -> None:
        if not self.quiet:
            print(message, file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)

    def progress(self, label: str) -> ProgressCallback | None:
        """Per-file callback for --verbose runs."""

        if not self.verbose:
            return None

        def _report(current: int, total: int, destination: Path, fell_back: bool) -> None:
            state = "passthrough" if fell_back else "done"
            self.info(f"{label} {current}/{total}: {destination.name} [{state}]")

        return _report

    def report_warnings(self, records: list[warnings.WarningMessage]) -> None:
        for text in filter(None, (str(record.message) for record in records)):
            self.info(f"Warning: {text}")

    @contextmanager
    def relaying_warnings(self) -> Iterator[None]:
        """Collect warnings raised in the block and print them afterwards."""

        with warnings.catch_warnings(record=True) as records:
            warnings.simplefilter("always")
            yield
        self.report_warnings(records)


def main(argv: list[str] | None = None) -> int:
    """Entry-point invoked by the `chapterprep` console script."""

    options = parse_cli_args(argv)
    console = Console(quiet=options.quiet, verbose=options.verbose)
    source = options.source

    if not source.exists():
        console.error(f"{source} does not exist")
        return 2

    if options.inspect:
        return _inspect(source, console)

    pipeline = Pipeline()
    console.info(f"Pipeline: {' -> '.join(pipeline.names)}")

    if not source.is_dir():
        return _transform_file(options, pipeline, console)

    output_dir = options.output or source.parent / f"{source.name}-prepared"
    console.info("Transform phase: starting")
    with console.relaying_warnings():
        written = run_transform_phase(
            options.settings,
            source,
            output_dir,
            pipeline=pipeline,
            progress_callback=console.progress("Transform phase"),
        )
    console.info(f"Transform phase: wrote {len(written)} file(s) to {output_dir}")
    return 0


def _transform_file(options: CliOptions, pipeline: Pipeline, console: Console) -> int:
    context = TransformContext(
        content=options.source.read_text(encoding="utf-8"),
        settings=options.settings,
        metadata={"source": str(options.source)},
    )

    def _fell_back(exc: TransformError) -> None:
        console.error(f"transformer '{exc.stage}' failed, keeping original markup: {exc}")

    with console.relaying_warnings():
        result = asyncio.run(pipeline.run_or_passthrough(context, on_error=_fell_back))

    if options.output is None:
        sys.stdout.write(result)
        return 0

    options.output.parent.mkdir(parents=True, exist_ok=True)
    options.output.write_text(result, encoding="utf-8")
    console.info(f"Wrote {options.output}")
    return 0


def _inspect(source: Path, console: Console) -> int:
    paths = list_markup_files(source) if source.is_dir() else [source]
    for path in paths:
        infos = diagnostics.inspect_gradient(path.read_text(encoding="utf-8"))
        print(f"{path.name}:")
        for line in diagnostics.summarize(infos):
            print(f"  {line}")
    console.info(f"Inspected {len(paths)} file(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
