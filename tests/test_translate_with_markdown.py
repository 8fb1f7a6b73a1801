from __future__ import annotations

from collections.abc import Callable

import pytest

from markflow.models.direction import TranslationDirection
from markflow.pipeline.context import TranslationContext
from markflow.pipeline.translate import translate_messages, translate_with_markdown
from markflow.providers.base import Translator
from markflow.providers.echo import EchoTranslator


class _FakeTranslator(Translator):
    provider = "fake"

    def __init__(self, fn: Callable[[str], str]) -> None:
        self.fn = fn
        self.calls: list[str] = []

    async def translate(self, text: str, direction: TranslationDirection) -> str:
        self.calls.append(text)
        return self.fn(text)


def _per_part(fn: Callable[[str], str]) -> Callable[[str], str]:
    return lambda text: "|".join(fn(p) for p in text.split("|"))


@pytest.mark.asyncio
async def test_bold_spans_are_translated_in_isolation(settings, direction) -> None:
    fake = _FakeTranslator(_per_part(lambda p: f"[T]{p}"))
    out = await translate_with_markdown(
        "Use **method1()** and **method2()** functions",
        translator=fake,
        direction=direction,
        settings=settings,
    )
    assert "**[T]method1()**" in out
    assert "**[T]method2()**" in out
    assert "[T]Use" in out
    assert "[T] and " in out
    assert "[T] functions" in out
    assert "****" not in out
    assert len(fake.calls) == 1


@pytest.mark.asyncio
async def test_inline_code_never_reaches_translator(settings, direction) -> None:
    fake = _FakeTranslator(_per_part(str.upper))
    out = await translate_with_markdown(
        "Use `console.log()` to **debug** your code",
        translator=fake,
        direction=direction,
        settings=settings,
    )
    assert out == "USE `console.log()` TO **DEBUG** YOUR CODE"
    assert all("console.log()" not in call for call in fake.calls)


@pytest.mark.asyncio
async def test_document_structure_is_preserved(settings, direction) -> None:
    text = (
        "# Getting started\n"
        "\n"
        "Install the tool:\n"
        "```bash\npip install tool\n```\n"
        "- first step\n"
        "- second step\n"
        "\n"
        "| Key | Meaning |\n"
        "|-----|---------|\n"
        "| a   | alpha   |\n"
        "> quoted stays\n"
        "- [ ] task stays"
    )
    fake = _FakeTranslator(_per_part(str.upper))
    out = await translate_with_markdown(text, translator=fake, direction=direction, settings=settings)
    assert out == (
        "# GETTING STARTED\n"
        "\n"
        "INSTALL THE TOOL:\n"
        "```bash\npip install tool\n```\n"
        "- FIRST STEP\n"
        "- SECOND STEP\n"
        "\n"
        "| KEY | MEANING |\n"
        "|-----|---------|\n"
        "| A   | ALPHA   |\n"
        "> quoted stays\n"
        "- [ ] task stays"
    )


@pytest.mark.asyncio
async def test_merged_batch_degrades_without_raising(settings, direction) -> None:
    fake = _FakeTranslator(lambda text: "no separators at all")
    out = await translate_with_markdown(
        "Start **middle** end",
        translator=fake,
        direction=direction,
        settings=settings,
    )
    assert out == "no separators at all **middle** end"


@pytest.mark.asyncio
async def test_translator_failure_returns_source(settings, direction) -> None:
    def _boom(text: str) -> str:
        raise RuntimeError("offline")

    text = "## Title\n\nSome **bold** words"
    ctx = TranslationContext.from_settings(_FakeTranslator(_boom), direction, settings)
    out = await translate_with_markdown(
        text, translator=ctx.translator, direction=direction, settings=settings, context=ctx
    )
    assert out == text
    assert ctx.stats.failed_batches == 2


@pytest.mark.asyncio
async def test_plain_text_is_translated_in_one_call(settings, direction) -> None:
    fake = _FakeTranslator(lambda text: text.upper())
    out = await translate_with_markdown(
        "Just a sentence | with a pipe.", translator=fake, direction=direction, settings=settings
    )
    assert out == "JUST A SENTENCE | WITH A PIPE."
    assert fake.calls == ["Just a sentence | with a pipe."]


@pytest.mark.asyncio
async def test_plain_text_retries_once_on_artifacts(settings, direction) -> None:
    answers = iter(["blah blah blah blah blah blah", "Puhdas käännös."])
    fake = _FakeTranslator(lambda text: next(answers))
    out = await translate_with_markdown("Clean text.", translator=fake, direction=direction, settings=settings)
    assert out == "Puhdas käännös."
    assert len(fake.calls) == 2


@pytest.mark.asyncio
async def test_preserve_formatting_off_uses_plain_path(settings, direction) -> None:
    fake = _FakeTranslator(lambda text: text)
    await translate_with_markdown(
        "Some **bold** text", translator=fake, direction=direction, preserve_formatting=False, settings=settings
    )
    assert fake.calls == ["Some **bold** text"]


@pytest.mark.asyncio
async def test_blank_and_unit_free_input_returned_unchanged(settings, direction) -> None:
    fake = _FakeTranslator(lambda text: "X")
    assert await translate_with_markdown("   \n", translator=fake, direction=direction, settings=settings) == "   \n"
    code_only = "```\nprint(1)\n```"
    assert await translate_with_markdown(code_only, translator=fake, direction=direction, settings=settings) == code_only
    assert fake.calls == []


@pytest.mark.asyncio
async def test_legacy_placeholders_are_stripped(settings, direction) -> None:
    fake = _FakeTranslator(_per_part(lambda p: p.replace("bold", "bold@@BOLD_0@@")))
    out = await translate_with_markdown(
        "Keep **bold** here", translator=fake, direction=direction, settings=settings
    )
    assert out == "Keep **bold** here"


@pytest.mark.asyncio
async def test_translate_messages_keeps_order(settings, direction) -> None:
    fake = _FakeTranslator(_per_part(str.upper))
    out = await translate_messages(
        ["one **a**", "two"], translator=fake, direction=direction, settings=settings
    )
    assert out == ["ONE **A**", "TWO"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text",
    [
        "Use a | b with **bold**",
        "| a \\| b | **c** |\n|---|---|",
    ],
)
async def test_pipe_inside_unit_text_survives_identity_translation(settings, direction, text: str) -> None:
    ctx = TranslationContext.from_settings(EchoTranslator(), direction, settings)
    out = await translate_with_markdown(
        text, translator=ctx.translator, direction=direction, settings=settings, context=ctx
    )
    assert out == text
    assert ctx.stats.realigned_batches == 0
    assert ctx.stats.source_fallbacks == 0
