"""Placement of translated text back onto the page's live content blocks.

Pairs are matched to blocks by normalized text: an exact match wins
immediately, otherwise the unconsumed pair whose text contains (or is
contained by) the block's text with the highest length ratio is used, provided
the ratio exceeds the similarity threshold. Each pair is placed at most once
and each block receives at most one translation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import logging

from browser_wand.config import FrozenConfig, default_config
from browser_wand.core.exceptions import AlignmentError
from browser_wand.core.types import AlignmentPair, BlockCategory, LiveBlock

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AlignmentReport:
    """Outcome of aligning one category of blocks."""

    applied: int = 0
    missed: int = 0
    skipped: int = 0
    unmatched_pairs: tuple[AlignmentPair, ...] = ()


@dataclass(frozen=True, slots=True)
class PageAlignmentReport:
    headings: AlignmentReport
    paragraphs: AlignmentReport

    @property
    def applied_count(self) -> int:
        return self.headings.applied + self.paragraphs.applied

    @property
    def missed_count(self) -> int:
        return self.headings.missed + self.paragraphs.missed


def normalize(text: str) -> str:
    """Collapse whitespace, strip, and casefold."""
    return " ".join((text or "").split()).casefold()


def similarity(a: str, b: str) -> float:
    """Score two normalized strings: 1.0 if equal, length ratio if nested, else 0."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        return min(len(a), len(b)) / max(len(a), len(b))
    return 0.0


def _best_pair(
    block_text: str, pairs: Sequence[AlignmentPair], min_similarity: float
) -> AlignmentPair | None:
    best: AlignmentPair | None = None
    best_score = 0.0
    for pair in pairs:
        if pair.consumed:
            continue
        score = similarity(block_text, normalize(pair.original))
        if score == 1.0:
            return pair
        if score > min_similarity and score > best_score:
            best, best_score = pair, score
    return best


def align(
    live_blocks: Iterable[LiveBlock],
    pairs: Sequence[AlignmentPair],
    *,
    min_length: int = 0,
    min_similarity: float = 0.5,
) -> AlignmentReport:
    """Apply translations from `pairs` to matching blocks.

    Blocks already processed, or whose stripped text is shorter than
    `min_length`, are skipped. Matched pairs are consumed and their blocks
    marked processed.
    """
    applied = missed = skipped = 0
    for block in live_blocks:
        text = (block.text or "").strip()
        if block.processed or len(text) < min_length:
            skipped += 1
            continue

        pair = _best_pair(normalize(text), pairs, min_similarity)
        if pair is None:
            missed += 1
            continue

        pair.consume()
        block.apply_translation(pair.translated)
        block.processed = True
        applied += 1

    unmatched = tuple(p for p in pairs if not p.consumed)
    log.debug(
        "Aligned %d blocks (%d missed, %d skipped, %d pairs unused)",
        applied,
        missed,
        skipped,
        len(unmatched),
    )
    return AlignmentReport(applied, missed, skipped, unmatched)


def align_page(
    get_live_blocks: Callable[[BlockCategory], Iterable[LiveBlock]],
    heading_pairs: Sequence[AlignmentPair],
    paragraph_pairs: Sequence[AlignmentPair],
    *,
    config: FrozenConfig | None = None,
) -> PageAlignmentReport:
    """Align headings first, then paragraphs, each against its own pairs."""
    cfg = config or default_config()
    headings = align(
        get_live_blocks(BlockCategory.HEADING),
        heading_pairs,
        min_length=cfg.min_heading_length,
        min_similarity=cfg.alignment_min_similarity,
    )
    paragraphs = align(
        get_live_blocks(BlockCategory.PARAGRAPH),
        paragraph_pairs,
        min_length=cfg.min_paragraph_length,
        min_similarity=cfg.alignment_min_similarity,
    )
    report = PageAlignmentReport(headings, paragraphs)
    log.info("Applied %d translations", report.applied_count)
    return report


def build_pairs(
    originals: Sequence[str], translations: Sequence[str]
) -> list[AlignmentPair]:
    """Zip originals with their translations.

    Raises:
        AlignmentError: If the two sequences differ in length.
    """
    if len(originals) != len(translations):
        raise AlignmentError(
            f"Got {len(translations)} translations for {len(originals)} originals"
        )
    return [AlignmentPair(o, t) for o, t in zip(originals, translations, strict=True)]
