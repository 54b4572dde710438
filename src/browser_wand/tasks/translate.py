"""Page translation: block extraction, batched translation, and placement."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import logging

from browser_wand.alignment.aligner import PageAlignmentReport, align_page, build_pairs, normalize
from browser_wand.config import FrozenConfig, default_config
from browser_wand.core.types import AlignmentPair, BlockCategory, Invoker, LiveBlock
from browser_wand.pipeline.batch import BatchTranslator
from browser_wand.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TextBlocks:
    """Headings and paragraphs selected for translation."""

    headings: tuple[str, ...] = ()
    paragraphs: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.headings) + len(self.paragraphs)


@dataclass(frozen=True, slots=True)
class TranslationPlan:
    """Translated pairs per block category, ready to be placed on the page."""

    target_language: str
    heading_pairs: tuple[AlignmentPair, ...] = ()
    paragraph_pairs: tuple[AlignmentPair, ...] = ()


def _select(texts: Iterable[str | None], min_length: int, limit: int) -> tuple[str, ...]:
    seen: set[str] = set()
    selected = []
    for raw in texts:
        text = (raw or "").strip()
        if not text or len(text) < min_length:
            continue
        key = normalize(text)
        if key in seen:
            continue
        seen.add(key)
        selected.append(text)
    return tuple(selected[:limit])


def extract_text_blocks(
    headings: Iterable[str | None],
    paragraphs: Iterable[str | None],
    config: FrozenConfig | None = None,
) -> TextBlocks:
    """Trim, drop short blocks, de-duplicate by normalized text, and cap counts."""
    cfg = config or default_config()
    blocks = TextBlocks(
        _select(headings, cfg.min_heading_length, cfg.max_headings),
        _select(paragraphs, cfg.min_paragraph_length, cfg.max_paragraphs),
    )
    log.debug(
        "Selected %d headings and %d paragraphs",
        len(blocks.headings),
        len(blocks.paragraphs),
    )
    return blocks


async def translate_page(
    blocks: TextBlocks,
    target_language: str,
    invoke: Invoker,
    config: FrozenConfig | None = None,
    *,
    telemetry: TelemetryContextProtocol | None = None,
) -> TranslationPlan:
    """Translate headings and paragraphs, each category in its own batches.

    Blocks whose batch failed come back as the placeholder and are left out
    of the plan, so they stay untranslated on the page.

    Raises:
        ModelRefusalError: If the model refuses any batch.
    """
    cfg = config or default_config()
    if not blocks:
        log.warning("No translatable content found")
        return TranslationPlan(target_language)

    translator = BatchTranslator(invoke, cfg, telemetry=telemetry)

    async def pairs_for(texts: tuple[str, ...]) -> tuple[AlignmentPair, ...]:
        if not texts:
            return ()
        translations = await translator.run(texts, target_language)
        return tuple(
            pair
            for pair in build_pairs(texts, translations)
            if pair.translated != cfg.translation_placeholder
        )

    heading_pairs = await pairs_for(blocks.headings)
    paragraph_pairs = await pairs_for(blocks.paragraphs)
    return TranslationPlan(target_language, heading_pairs, paragraph_pairs)


def apply_translation(
    plan: TranslationPlan,
    get_live_blocks: Callable[[BlockCategory], Iterable[LiveBlock]],
    config: FrozenConfig | None = None,
) -> PageAlignmentReport:
    """Place a plan's translations on the live blocks.

    Fresh pairs are built for each call, so a plan can be applied again to
    a re-rendered page.
    """
    return align_page(
        get_live_blocks,
        [AlignmentPair(p.original, p.translated) for p in plan.heading_pairs],
        [AlignmentPair(p.original, p.translated) for p in plan.paragraph_pairs],
        config=config,
    )
