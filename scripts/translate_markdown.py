from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from markflow.config import Settings
from markflow.models.direction import TranslationDirection
from markflow.pipeline import ChunkAggregator, translate_with_markdown
from markflow.providers import get_translator
from markflow.utils.logging_setup import setup_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Translate a markdown document, keeping its formatting.")
    parser.add_argument("--input", default=None, help="Markdown file (defaults to stdin)")
    parser.add_argument("--output", default=None, help="Write result here (defaults to stdout)")
    parser.add_argument("--provider", default=None, help="Translator provider, e.g. tartunlp/echo")
    parser.add_argument("--source-language", default=None, help="Source language code")
    parser.add_argument("--target-language", default=None, help="Target language code")
    parser.add_argument("--plain", action="store_true", help="Translate as plain text (no markdown handling)")
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Replay the input through the streaming aggregator, translating chunk by chunk",
    )
    parser.add_argument("--fragment-size", type=int, default=16, help="Characters per replayed fragment")
    return parser.parse_args()


async def _run() -> int:
    args = _parse_args()
    if args.input:
        path = Path(args.input)
        if not path.exists():
            raise SystemExit(f"Input not found: {path}")
        text = path.read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    settings = Settings()
    if args.provider is not None:
        settings.translator.provider = str(args.provider)
    if args.source_language is not None:
        settings.translator.source_language = str(args.source_language)
    if args.target_language is not None:
        settings.translator.target_language = str(args.target_language)
    setup_logging(settings)

    direction: TranslationDirection = settings.direction()
    preserve = not args.plain

    async with get_translator(settings.translator_config()) as translator:
        if not args.stream:
            result = await translate_with_markdown(
                text,
                translator=translator,
                direction=direction,
                preserve_formatting=preserve,
                settings=settings,
            )
        else:
            pieces: list[str] = []

            async def _on_chunk(chunk: str) -> None:
                pieces.append(
                    await translate_with_markdown(
                        chunk,
                        translator=translator,
                        direction=direction,
                        preserve_formatting=preserve,
                        settings=settings,
                    )
                )

            aggregator = ChunkAggregator(_on_chunk, config=settings.aggregator)
            size = max(1, int(args.fragment_size))
            for start in range(0, len(text), size):
                await aggregator.add_chunk(text[start : start + size])
            await aggregator.flush()
            result = "".join(pieces)

    if args.output:
        Path(args.output).write_text(result, encoding="utf-8")
    else:
        sys.stdout.write(result)
    return 0


def main() -> None:
    raise SystemExit(asyncio.run(_run()))


if __name__ == "__main__":
    main()
