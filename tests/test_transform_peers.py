import pytest

from chapterprep.settings import ViewSettings
from chapterprep.transformers import TransformContext
from chapterprep.transformers.footnote_transformer import Transformer as FootnoteTransformer
from chapterprep.transformers.language_transformer import Transformer as LanguageTransformer
from chapterprep.transformers.punctuation_transformer import (
    Transformer as PunctuationTransformer,
)
from chapterprep.transformers.sanitize_transformer import Transformer as SanitizeTransformer
from chapterprep.transformers.whitespace_transformer import (
    Transformer as WhitespaceTransformer,
)


async def _run(transformer, content: str, **flags) -> str:
    context = TransformContext(content=content, settings=ViewSettings(**flags))
    return await transformer.transform(context)


@pytest.mark.asyncio
async def test_peer_transformers_are_identity_when_disabled() -> None:
    html = '<html><body><script>x()</script><p onclick="y()">"A"  b</p></body></html>'

    for transformer in (
        SanitizeTransformer(),
        PunctuationTransformer(),
        FootnoteTransformer(),
        LanguageTransformer(),
        WhitespaceTransformer(),
    ):
        assert await _run(transformer, html) == html


@pytest.mark.asyncio
async def test_sanitize_strips_scripts_and_handlers() -> None:
    html = '<div><script>alert(1)</script><p onclick="y()" class="a">Text</p><style>p{}</style></div>'

    result = await _run(SanitizeTransformer(), html, sanitize_enabled=True)

    assert "script" not in result
    assert "style" not in result
    assert "onclick" not in result
    assert '<p class="a">Text</p>' in result


@pytest.mark.asyncio
async def test_sanitize_leaves_clean_markup_verbatim() -> None:
    html = "<P CLASS='a'>Text</P>"

    assert await _run(SanitizeTransformer(), html, sanitize_enabled=True) == html


@pytest.mark.asyncio
async def test_punctuation_curls_quotes_in_text_only() -> None:
    html = '<p class="x">"Don\'t," she said.</p>'

    result = await _run(PunctuationTransformer(), html, replace_quotation_marks=True)

    assert result == '<p class="x">“Don’t,” she said.</p>'


@pytest.mark.asyncio
async def test_footnote_marks_references_and_hides_notes() -> None:
    html = (
        '<p>Text<a epub:type="noteref" href="#n1">1</a></p>'
        '<aside epub:type="footnote" id="n1">Note</aside>'
    )

    result = await _run(FootnoteTransformer(), html, footnote_enabled=True)

    assert 'role="doc-noteref"' in result
    assert 'role="doc-footnote"' in result
    assert "hidden" in result


@pytest.mark.asyncio
async def test_footnote_without_notes_is_verbatim() -> None:
    html = "<p>No <a href='#x'>notes</a></p>"

    assert await _run(FootnoteTransformer(), html, footnote_enabled=True) == html


@pytest.mark.asyncio
async def test_language_sets_missing_lang_only() -> None:
    transformer = LanguageTransformer()

    assert await _run(transformer, "<html><body></body></html>", content_language="ja") == (
        '<html lang="ja"><body></body></html>'
    )
    tagged = '<html lang="en"><body></body></html>'
    assert await _run(transformer, tagged, content_language="ja") == tagged


@pytest.mark.asyncio
async def test_whitespace_collapses_outside_pre() -> None:
    html = "<p>a   b\n c</p>\n\n<pre>  keep\n  this</pre>"

    result = await _run(WhitespaceTransformer(), html, collapse_whitespace=True)

    assert result == "<p>a b c</p> <pre>  keep\n  this</pre>"


@pytest.mark.asyncio
async def test_punctuation_leaves_styles_scripts_and_comments_alone() -> None:
    html = (
        '<style>p { font-family: "Foo"; }</style>'
        "<!-- \"draft\" -->"
        "<script>var s = 'x';</script>"
        '<p>"Quoted"</p>'
    )

    result = await _run(PunctuationTransformer(), html, replace_quotation_marks=True)

    assert result == (
        '<style>p { font-family: "Foo"; }</style>'
        "<!-- \"draft\" -->"
        "<script>var s = 'x';</script>"
        "<p>“Quoted”</p>"
    )
