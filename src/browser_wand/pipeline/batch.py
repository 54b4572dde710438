"""Sequential chunk-and-reduce processing and batched translation.

Both entry points call the model strictly one request at a time. A failed
call degrades only its own chunk or batch; `ModelRefusalError` is the one
failure that always propagates.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import json
import logging
from typing import Any

from browser_wand.config import FrozenConfig, default_config
from browser_wand.core.exceptions import BrowserWandError, ModelRefusalError
from browser_wand.core.shapes import TEXT, ArrayShape, Shape
from browser_wand.core.types import (
    Failure,
    Invoker,
    ParsedResult,
    Result,
    Success,
    Unparsable,
)
from browser_wand.pipeline.base import BaseAsyncHandler
from browser_wand.pipeline.chunker import batch_list, split
from browser_wand.pipeline.prompts import ChunkPrompts, TranslationPrompts
from browser_wand.response.parser import parse_envelope
from browser_wand.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)

SECTION_PLACEHOLDER = "[section unavailable]"
TRANSLATION_PLACEHOLDER = "[unavailable]"


def render_output(result: ParsedResult) -> str:
    """Render one chunk's parsed output as text for the reduce prompt."""
    match result:
        case Unparsable(raw_text=raw):
            return raw
        case _ if isinstance(result.payload, str):
            return result.payload
        case _:
            return json.dumps(result.payload, ensure_ascii=False, indent=2)


def render_sections(results: Sequence[ParsedResult]) -> str:
    """Join chunk outputs with numbered `--- Section i ---` separators."""
    return "\n\n".join(
        f"--- Section {i} ---\n{render_output(result)}"
        for i, result in enumerate(results, start=1)
    )


async def process_in_chunks(
    text: str,
    max_size: int,
    overlap: int,
    invoke: Invoker,
    *,
    shape: Shape = TEXT,
    max_chunks: int | None = None,
    prompts: ChunkPrompts | None = None,
    timeout: float | None = None,
    telemetry: TelemetryContextProtocol | None = None,
    placeholder: str = SECTION_PLACEHOLDER,
) -> ParsedResult:
    """Run one request over a long text, chunk by chunk, then reduce.

    Args:
        text: Source document.
        max_size: Maximum new characters per chunk.
        overlap: Characters repeated between neighbouring chunks.
        invoke: Model invoker.
        shape: Expected shape of every chunk reply and of the reduce reply.
        max_chunks: Chunks beyond this count are dropped with a warning.
        prompts: Prompt builders; defaults to summarization wording.
        timeout: Seconds for the whole job, including the reduce call.
        telemetry: Telemetry context; defaults to the no-op context.
        placeholder: Text standing in for a chunk whose call failed.

    Returns:
        The single chunk's result, or the parsed reduce reply.

    Raises:
        ModelRefusalError: If any call is refused.
        TimeoutError: If `timeout` expires; no further calls are made.
    """
    prompts = prompts or ChunkPrompts()
    tele = telemetry or TelemetryContext()

    async with asyncio.timeout(timeout):
        chunks = split(text, max_size, overlap)
        if not chunks:
            return Unparsable(text, error="empty input")
        if max_chunks is not None and len(chunks) > max_chunks:
            log.warning(
                "Dropping %d of %d chunks (max_chunks=%d)",
                len(chunks) - max_chunks,
                len(chunks),
                max_chunks,
            )
            chunks = chunks[:max_chunks]

        total = len(chunks)
        outputs: list[ParsedResult] = []
        failures = 0
        for index, chunk in enumerate(chunks):
            failure: Exception | None = None
            with tele("batch.chunk", index=index, total=total):
                try:
                    envelope = await invoke(prompts.chunk(chunk.text, index, total))
                except ModelRefusalError:
                    raise
                except Exception as e:
                    failure = e
                else:
                    outputs.append(parse_envelope(envelope, shape))

            if failure is not None:
                log.warning(
                    "Chunk %d/%d failed: %s", index + 1, total, failure, exc_info=failure
                )
                tele.count("batch.chunk_failures")
                failures += 1
                outputs.append(Unparsable(placeholder, error=str(failure)))

        if total == 1:
            return outputs[0]

        sections = render_sections(outputs)
        if failures == total:
            return Unparsable(sections, error="all sections unavailable")

        with tele("batch.reduce", sections=total):
            try:
                envelope = await invoke(prompts.reduce(sections))
            except ModelRefusalError:
                raise
            except Exception as e:
                log.warning("Reduce call failed: %s", e)
                return Unparsable(sections, error=str(e))
            return parse_envelope(envelope, shape)


def _batch_translations(result: ParsedResult, expected: int) -> list[str] | None:
    if isinstance(result, Unparsable):
        return None
    items = result.payload
    if not isinstance(items, list) or len(items) != expected:
        return None
    return [item if isinstance(item, str) else str(item) for item in items]


async def translate_batches(
    items: Sequence[Any],
    batch_size: int,
    invoke: Invoker,
    *,
    placeholder: str = TRANSLATION_PLACEHOLDER,
    prompts: TranslationPrompts | None = None,
    telemetry: TelemetryContextProtocol | None = None,
) -> list[str]:
    """Translate `items` in fixed-size batches, preserving length and order.

    A batch whose call fails, whose reply cannot be parsed, or whose reply
    holds the wrong number of items is replaced entirely by `placeholder`.

    Raises:
        ModelRefusalError: If any batch is refused.
    """
    prompts = prompts or TranslationPrompts()
    tele = telemetry or TelemetryContext()
    texts = [str(item) for item in items]

    output: list[str] = []
    for index, batch in enumerate(batch_list(texts, batch_size)):
        translations: list[str] | None = None
        with tele("batch.translate", index=index, size=len(batch)):
            try:
                envelope = await invoke(prompts.batch(batch))
            except ModelRefusalError:
                raise
            except Exception as e:
                log.warning("Translation batch %d failed: %s", index + 1, e)
            else:
                result = parse_envelope(envelope, ArrayShape(len(batch)))
                translations = _batch_translations(result, len(batch))
                if translations is None:
                    log.warning(
                        "Translation batch %d returned an unusable reply (%s)",
                        index + 1,
                        type(result).__name__,
                    )

        if translations is None:
            tele.count("batch.placeholder_batches")
            translations = [placeholder] * len(batch)
        output.extend(translations)

    return output


# --- Handlers ---


class ChunkedProcessor(BaseAsyncHandler[str, ParsedResult, BrowserWandError]):
    """Handler running `process_in_chunks` with configured sizes and limits."""

    def __init__(
        self,
        invoke: Invoker,
        config: FrozenConfig | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.invoke = invoke
        self.config = config or default_config()
        self.telemetry = telemetry

    async def run(
        self,
        text: str,
        *,
        shape: Shape = TEXT,
        prompts: ChunkPrompts | None = None,
    ) -> ParsedResult:
        """Process `text`; refusals and timeouts raise."""
        cfg = self.config
        return await process_in_chunks(
            text,
            cfg.max_chunk_size,
            cfg.chunk_overlap,
            self.invoke,
            shape=shape,
            max_chunks=cfg.max_chunks_per_request,
            prompts=prompts,
            timeout=cfg.request_timeout_seconds,
            telemetry=self.telemetry,
            placeholder=cfg.section_placeholder,
        )

    async def handle(self, command: str) -> Result[ParsedResult, BrowserWandError]:
        """Summarize-style processing of `command`, reported as a `Result`."""
        try:
            return Success(await self.run(command))
        except BrowserWandError as e:
            return Failure(e)
        except TimeoutError as e:
            return Failure(BrowserWandError(f"Request timed out: {e}"))


class BatchTranslator(
    BaseAsyncHandler[tuple[Sequence[Any], str], list[str], BrowserWandError]
):
    """Handler running `translate_batches` with configured batch size."""

    def __init__(
        self,
        invoke: Invoker,
        config: FrozenConfig | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.invoke = invoke
        self.config = config or default_config()
        self.telemetry = telemetry

    async def run(self, items: Sequence[Any], target_language: str) -> list[str]:
        return await translate_batches(
            items,
            self.config.translation_batch_size,
            self.invoke,
            placeholder=self.config.translation_placeholder,
            prompts=TranslationPrompts(target_language),
            telemetry=self.telemetry,
        )

    async def handle(
        self, command: tuple[Sequence[Any], str]
    ) -> Result[list[str], BrowserWandError]:
        """Translate `(items, target_language)`, reported as a `Result`."""
        items, target_language = command
        try:
            return Success(await self.run(items, target_language))
        except BrowserWandError as e:
            return Failure(e)

