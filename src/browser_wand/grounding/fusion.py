"""Fusion of model-written entities with search grounding candidates.

The model's structured reply names entities but often invents or omits their
URLs; the grounding metadata carries real URLs but only loose titles. `fuse`
assigns each entity without a trustworthy URL the best-scoring unused
candidate, then promotes leftover candidates to minimal entities of their own.

Scoring (points are configurable, defaults shown):

- +10 when normalized source names are equal,
- +5 when one normalized source name contains the other,
- +2 per significant title token the two titles share.

A candidate is assigned only when its score reaches `grounding_min_score`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import dataclasses
import logging
import re

from browser_wand.config import FrozenConfig, default_config
from browser_wand.core.types import Entity, GroundingCandidate, Product, TimelineEvent
from browser_wand.grounding.extractors import extract_date, extract_price, strip_site_suffix

log = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+")
_TLD_RE = re.compile(r"\.(?:[a-z]{2,})(?:\.[a-z]{2})?$")
_NON_ALNUM_RE = re.compile(r"[^0-9a-z]+")


def normalize_source_name(name: str) -> str:
    """Lowercase, drop `www.` and a trailing TLD, keep only letters and digits.

    >>> normalize_source_name("www.Amazon.co.uk")
    'amazon'
    """
    value = (name or "").strip().lower()
    value = value.removeprefix("www.")
    value = _TLD_RE.sub("", value)
    return _NON_ALNUM_RE.sub("", value)


def significant_tokens(text: str, min_length: int = 4) -> set[str]:
    """Lowercased word tokens of at least `min_length` characters."""
    return {t for t in _TOKEN_RE.findall((text or "").lower()) if len(t) >= min_length}


def has_confident_url(entity: Entity) -> bool:
    url = entity.url.strip()
    return url.startswith(("http://", "https://")) and len(url) > len("https://")


def score_candidate(
    entity: Entity, candidate: GroundingCandidate, config: FrozenConfig | None = None
) -> int:
    """Score how well `candidate` matches `entity`."""
    cfg = config or default_config()
    score = 0

    entity_source = normalize_source_name(entity.source_name)
    candidate_source = normalize_source_name(candidate.source_name)
    if entity_source and candidate_source:
        if entity_source == candidate_source:
            score += cfg.grounding_exact_source_points
        elif entity_source in candidate_source or candidate_source in entity_source:
            score += cfg.grounding_partial_source_points

    shared = significant_tokens(
        entity.title, cfg.grounding_min_token_length
    ) & significant_tokens(candidate.title, cfg.grounding_min_token_length)
    score += cfg.grounding_token_points * len(shared)
    return score


def _best_candidate(
    entity: Entity, pool: Sequence[GroundingCandidate], cfg: FrozenConfig
) -> int | None:
    best_index: int | None = None
    best_score = -1
    for index, candidate in enumerate(pool):
        score = score_candidate(entity, candidate, cfg)
        if score > best_score:
            best_index, best_score = index, score
    if best_index is None or best_score < cfg.grounding_min_score:
        return None
    return best_index


def promote(candidate: GroundingCandidate, kind: type[Entity] = Product) -> Entity:
    """Build a minimal entity of type `kind` from a leftover candidate."""
    title = strip_site_suffix(candidate.title) or candidate.source_name or candidate.uri
    fields = {"title": title, "url": candidate.uri, "source_name": candidate.source_name}
    if issubclass(kind, Product):
        fields["price"] = extract_price(candidate.title)
    elif issubclass(kind, TimelineEvent):
        fields["date"] = extract_date(candidate.title)
    return kind(**fields)


def _dedupe_by_url(entities: Iterable[Entity]) -> list[Entity]:
    seen: set[str] = set()
    unique = []
    for entity in entities:
        if entity.url:
            if entity.url in seen:
                continue
            seen.add(entity.url)
        unique.append(entity)
    return unique


def fuse(
    entities: Sequence[Entity],
    candidates: Sequence[GroundingCandidate],
    *,
    kind: type[Entity] = Product,
    config: FrozenConfig | None = None,
) -> list[Entity]:
    """Attach grounding URLs to entities and promote unused candidates.

    Args:
        entities: Entities parsed from the model's reply, in reply order.
        candidates: Grounding candidates in provider order.
        kind: Entity type used for promoted candidates.
        config: Scoring points, threshold and `max_results`.

    Returns:
        At most `max_results` entities, original ones first, unique by URL.
    """
    cfg = config or default_config()
    confident = {e.url.strip() for e in entities if has_confident_url(e)}
    pool = [c for c in candidates if c.uri not in confident]

    fused: list[Entity] = []
    for entity in entities:
        if has_confident_url(entity):
            fused.append(entity)
            continue
        index = _best_candidate(entity, pool, cfg)
        if index is None:
            fused.append(dataclasses.replace(entity, url=""))
            continue
        candidate = pool.pop(index)
        fused.append(
            dataclasses.replace(
                entity,
                url=candidate.uri,
                source_name=entity.source_name or candidate.source_name,
            )
        )

    room = max(cfg.max_results - len(entities), 0)
    promoted = [promote(c, kind) for c in pool[:room]]
    if promoted:
        log.debug("Promoted %d grounding candidates to %s", len(promoted), kind.__name__)

    return _dedupe_by_url(fused + promoted)[: cfg.max_results]
