import asyncio
from types import SimpleNamespace

import pytest

from chapterprep.errors import TransformError
from chapterprep.settings import ViewSettings
from chapterprep.transform import Pipeline, transform_markup
from chapterprep.transformers import DEFAULT_ORDER, TransformContext, load_transformer


class AppendTransformer:
    def __init__(self, name: str, suffix: str) -> None:
        self.name = name
        self.suffix = suffix
        self.seen: list[str] = []

    async def transform(self, context: TransformContext) -> str:
        self.seen.append(context.content)
        await asyncio.sleep(0)
        return context.content + self.suffix


class FailingTransformer:
    name = "broken"

    async def transform(self, context: TransformContext) -> str:
        raise RuntimeError("boom")


class NonStringTransformer:
    name = "nonstring"

    async def transform(self, context: TransformContext) -> str:
        return None  # type: ignore[return-value]


def _context(content: str, settings: ViewSettings | None = None) -> TransformContext:
    return TransformContext(content=content, settings=settings or ViewSettings())


@pytest.mark.asyncio
async def test_pipeline_feeds_each_stage_the_previous_output() -> None:
    first = AppendTransformer("a", "-A")
    second = AppendTransformer("b", "-B")
    pipeline = Pipeline([first, second])

    result = await pipeline.run(_context("start"))

    assert result == "start-A-B"
    assert first.seen == ["start"]
    assert second.seen == ["start-A"]
    assert pipeline.names == ("a", "b")


def test_pipeline_rejects_duplicate_names() -> None:
    with pytest.raises(ValueError):
        Pipeline([AppendTransformer("a", "1"), AppendTransformer("a", "2")])


@pytest.mark.asyncio
async def test_pipeline_fails_fast_and_names_the_stage() -> None:
    after = AppendTransformer("after", "!")
    pipeline = Pipeline([AppendTransformer("before", "?"), FailingTransformer(), after])

    with pytest.raises(TransformError) as excinfo:
        await pipeline.run(_context("x"))

    assert excinfo.value.stage == "broken"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert after.seen == []


@pytest.mark.asyncio
async def test_pipeline_rejects_non_string_results() -> None:
    pipeline = Pipeline([NonStringTransformer()])

    with pytest.raises(TransformError, match="expected str"):
        await pipeline.run(_context("x"))


@pytest.mark.asyncio
async def test_run_or_passthrough_returns_original_content() -> None:
    errors: list[TransformError] = []
    pipeline = Pipeline([AppendTransformer("a", "-A"), FailingTransformer()])

    result = await pipeline.run_or_passthrough(_context("orig"), on_error=errors.append)

    assert result == "orig"
    assert [error.stage for error in errors] == ["broken"]


def test_default_pipeline_order() -> None:
    pipeline = Pipeline()

    assert pipeline.names == (
        "sanitize",
        "punctuation",
        "footnote",
        "language",
        "whitespace",
        "gradient",
    )
    assert len(DEFAULT_ORDER) == len(pipeline.names)


def test_default_pipeline_is_identity_when_everything_disabled() -> None:
    html = "<html><body><p class='x'>\"Hi\"  there</p><script>x()</script></body></html>"

    assert transform_markup(html, ViewSettings()) == html


def test_default_pipeline_runs_gradient_last() -> None:
    settings = ViewSettings(gradient_enabled=True, collapse_whitespace=True)

    result = Pipeline().run_sync("<p>Hello</p>\n\n<p>World</p>", settings)

    assert result == '<p class="g-line g-l0">Hello</p> <p class="g-line g-l1">World</p>'


def test_pipeline_is_deterministic() -> None:
    settings = ViewSettings(
        gradient_enabled=True,
        gradient_clip_enabled=True,
        replace_quotation_marks=True,
        sanitize_enabled=True,
    )
    html = "<p onclick='x()'>\"One\"</p><p>Two</p>"

    assert transform_markup(html, settings) == transform_markup(html, settings)


@pytest.mark.asyncio
async def test_concurrent_documents_do_not_share_counters() -> None:
    pipeline = Pipeline()
    settings = ViewSettings(gradient_enabled=True)

    first, second = await asyncio.gather(
        pipeline.run(_context("<p>a</p><p>b</p>", settings)),
        pipeline.run(_context("<p>c</p>", settings)),
    )

    assert first == '<p class="g-line g-l0">a</p><p class="g-line g-l1">b</p>'
    assert second == '<p class="g-line g-l0">c</p>'


def test_load_transformer_instantiates_module_class() -> None:
    assert load_transformer("gradient_transformer").name == "gradient"

    with pytest.raises(ModuleNotFoundError):
        load_transformer("does_not_exist")


def test_load_transformer_requires_transformer_class(monkeypatch) -> None:
    monkeypatch.setattr(
        "chapterprep.transformers.import_module", lambda path: SimpleNamespace()
    )

    with pytest.raises(ImportError, match="'empty_transformer' missing Transformer class"):
        load_transformer("empty_transformer")


def test_context_metadata_is_read_only() -> None:
    context = TransformContext(content="x", settings=ViewSettings(), metadata={"a": 1})

    with pytest.raises(TypeError):
        context.metadata["a"] = 2  # type: ignore[index]
    assert context.with_content("y").metadata == {"a": 1}
