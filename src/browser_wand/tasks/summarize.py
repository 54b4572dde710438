"""Page summarization over the chunked processor."""

from __future__ import annotations

import logging

from browser_wand.config import FrozenConfig, default_config
from browser_wand.core.types import Invoker, Unparsable
from browser_wand.pipeline.batch import ChunkedProcessor
from browser_wand.pipeline.prompts import ChunkPrompts
from browser_wand.response.parser import strip_code_fence
from browser_wand.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


def compose_document(body: str, title: str = "", url: str = "") -> str:
    """Prefix page Markdown with its title and source URL."""
    header = f"# {title or 'Page Content'}"
    if url:
        header += f"\n\nSource: {url}"
    return f"{header}\n\n---\n\n{body}"


async def summarize_page(
    markdown: str,
    invoke: Invoker,
    config: FrozenConfig | None = None,
    *,
    request: str = "Summarize this content.",
    telemetry: TelemetryContextProtocol | None = None,
) -> str:
    """Summarize `markdown`, chunking and reducing when it is long.

    Returns the summary text. When no reply could be parsed the best
    available raw text is returned instead, so the caller always has
    something to show.

    Raises:
        ModelRefusalError: If the model refuses any part of the request.
    """
    processor = ChunkedProcessor(invoke, config or default_config(), telemetry=telemetry)
    result = await processor.run(markdown, prompts=ChunkPrompts(request))

    if isinstance(result, Unparsable):
        log.warning("Summary reply was unusable (%s); returning raw text", result.error)
        return strip_code_fence(result.raw_text)
    return str(result.payload)
