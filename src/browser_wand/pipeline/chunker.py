"""Boundary-aware splitting of long text and fixed-size batching of lists.

`split` walks the source in windows of `max_size` new characters. Each window
is cut at a heading if possible, then at a paragraph break, then at a sentence
end, searching backward only within the second half of the window so no
chunk carries less than half a window of new text. Every chunk after the
first also repeats the last `overlap` characters of its predecessor as
context. Chunk text is always the exact slice of the source named by its
offsets.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging

from browser_wand.core.types import BatchJob, Chunk

log = logging.getLogger(__name__)

HEADING_MARKER = "\n#"
PARAGRAPH_BREAK = "\n\n"
SENTENCE_ENDINGS = (". ", "! ", "? ")


def _find_boundary(text: str, window_start: int, max_size: int) -> int:
    """Return the cut offset for the window beginning at `window_start`."""
    end = window_start + max_size
    floor = window_start + max_size // 2 + 1

    # Cut before the newline so the heading opens the next chunk.
    heading = text.rfind(HEADING_MARKER, floor, end)
    if heading != -1:
        return heading

    paragraph = text.rfind(PARAGRAPH_BREAK, floor, end)
    if paragraph != -1:
        return paragraph

    sentence = max(text.rfind(mark, floor, end) for mark in SENTENCE_ENDINGS)
    if sentence != -1:
        return sentence + 1

    return end


def split(text: str, max_size: int, overlap: int = 0) -> list[Chunk]:
    """Split `text` into boundary-aware chunks.

    Args:
        text: Source text.
        max_size: Maximum new (non-overlapping) characters per chunk. With the
            overlap prefix, a chunk's text is at most `max_size + overlap`
            characters long.
        overlap: Characters of the previous chunk repeated at the start of the
            next one; must be smaller than `max_size`.

    Returns:
        Chunks in source order with strictly increasing start offsets that
        together cover the whole source.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if not 0 <= overlap < max_size:
        raise ValueError(
            f"overlap must satisfy 0 <= overlap < max_size, got {overlap} (max_size={max_size})"
        )
    if not text:
        return []
    if len(text) <= max_size:
        return [Chunk(text, 0, len(text))]

    chunks: list[Chunk] = []
    window_start = 0
    while True:
        if window_start + max_size >= len(text):
            end = len(text)
        else:
            end = _find_boundary(text, window_start, max_size)

        start = max(window_start - overlap, 0)
        if chunks and start <= chunks[-1].start_offset:
            start = window_start
        chunks.append(Chunk(text[start:end], start, end))

        if end >= len(text):
            break
        window_start = end

    log.debug(
        "Split %d chars into %d chunks (max_size=%d, overlap=%d)",
        len(text),
        len(chunks),
        max_size,
        overlap,
    )
    return chunks


def plan_chunks(text: str, max_size: int, overlap: int = 0) -> BatchJob[Chunk]:
    """Split `text` and record the parameters used, as a `BatchJob`."""
    return BatchJob(tuple(split(text, max_size, overlap)), max_size, overlap)


def batch_list[T](items: Sequence[T], batch_size: int) -> list[list[T]]:
    """Slice `items` into contiguous, non-overlapping groups of `batch_size`."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]
