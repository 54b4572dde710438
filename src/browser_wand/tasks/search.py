"""Grounded product and news-timeline search.

The model is asked for a JSON object; whatever of it survives parsing or
truncation repair is validated item by item into entities, which are then
fused with the reply's search grounding so each result carries a real URL.
Use an invoker with search grounding enabled (`GeminiInvoker(use_search=True)`).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from browser_wand.config import FrozenConfig, default_config
from browser_wand.core.shapes import PRODUCT_SEARCH_SHAPE, TIMELINE_SHAPE, ObjectShape
from browser_wand.core.types import (
    Entity,
    Invoker,
    Product,
    PromptParts,
    TimelineEvent,
    Unparsable,
)
from browser_wand.grounding.fusion import fuse
from browser_wand.response.parser import parse_envelope, strip_code_fence

log = logging.getLogger(__name__)

PRODUCT_SYSTEM_INSTRUCTION = """You are a shopping research assistant with access to Google Search.
Find products that match the user's request and answer with ONLY a JSON object:
{"type": "products", "summary": "...", "products": [{"title": "...", "price": "...", "description": "...", "url": "...", "sourceName": "...", "imageUrl": "..."}]}"""

TIMELINE_SYSTEM_INSTRUCTION = """You are a news research assistant with access to Google Search.
Research the background of the user's topic and answer with ONLY a JSON object:
{"summary": "...", "background": "...", "timeline": [{"date": "...", "title": "...", "description": "...", "url": "...", "sourceName": "..."}], "keyPoints": ["..."]}
Order timeline events from oldest to newest."""


# --- Records ---


class _EntityRecord(BaseModel):
    """Lenient view of one entity object in a model reply."""

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )

    title: str = Field(min_length=1, validation_alias=AliasChoices("title", "name"))
    description: str = ""
    url: str = Field(default="", validation_alias=AliasChoices("url", "link"))
    source_name: str = Field(
        default="",
        validation_alias=AliasChoices("sourceName", "source_name", "source"),
    )

    @field_validator("*", mode="before")
    @classmethod
    def clean_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value


class ProductRecord(_EntityRecord):
    price: str = ""
    image_url: str = Field(
        default="", validation_alias=AliasChoices("imageUrl", "image_url", "image")
    )

    def to_entity(self) -> Product:
        return Product(
            title=self.title,
            description=self.description,
            url=self.url,
            source_name=self.source_name,
            price=self.price,
            image_url=self.image_url,
        )


class TimelineEventRecord(_EntityRecord):
    date: str = ""

    def to_entity(self) -> TimelineEvent:
        return TimelineEvent(
            title=self.title,
            description=self.description,
            url=self.url,
            source_name=self.source_name,
            date=self.date,
        )


def records_to_entities(
    items: Any, record_type: type[ProductRecord] | type[TimelineEventRecord]
) -> list[Entity]:
    """Validate each item; invalid or non-object items are dropped."""
    if not isinstance(items, list):
        return []
    entities: list[Entity] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            record = record_type.model_validate(item)
        except ValidationError as e:
            log.debug("Dropping invalid %s: %s", record_type.__name__, e)
            continue
        entities.append(record.to_entity())
    return entities


# --- Search ---


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Fused search outcome.

    `method` names how the reply was read: a parser method such as
    `balanced_scan` or `truncation_repair`, or `unparsable`.
    """

    summary: str
    entities: tuple[Entity, ...]
    method: str
    background: str = ""
    key_points: tuple[str, ...] = ()


def _text_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    texts = (str(v).strip() for v in value if isinstance(v, str | int | float))
    return tuple(t for t in texts if t)


def _user_message(query: str, context: str) -> str:
    if not context:
        return query
    return f"{query}\n\nCurrent page context:\n{context}"


async def _search(
    query: str,
    invoke: Invoker,
    *,
    system_instruction: str,
    shape: ObjectShape,
    list_field: str,
    record_type: type[ProductRecord] | type[TimelineEventRecord],
    kind: type[Entity],
    context: str,
    config: FrozenConfig | None,
) -> SearchResult:
    cfg = config or default_config()
    envelope = await invoke(PromptParts(_user_message(query, context), system_instruction))
    result = parse_envelope(envelope, shape)

    if isinstance(result, Unparsable) or not isinstance(result.payload, dict):
        log.warning("Search reply had no usable object; keeping grounding only")
        entities = fuse([], envelope.grounding_candidates, kind=kind, config=cfg)
        summary = strip_code_fence(envelope.raw_text) if isinstance(result, Unparsable) else ""
        return SearchResult(summary, tuple(entities), "unparsable")

    payload: dict[str, Any] = result.payload
    parsed = records_to_entities(payload.get(list_field), record_type)
    entities = fuse(parsed, envelope.grounding_candidates, kind=kind, config=cfg)
    log.debug(
        "Search via %s: %d parsed, %d after fusion", result.method, len(parsed), len(entities)
    )
    return SearchResult(
        summary=str(payload.get("summary") or ""),
        entities=tuple(entities),
        method=result.method,
        background=str(payload.get("background") or ""),
        key_points=_text_list(payload.get("keyPoints")),
    )


async def search_products(
    query: str,
    invoke: Invoker,
    config: FrozenConfig | None = None,
    *,
    context: str = "",
) -> SearchResult:
    """Search for products matching `query` and fuse them with grounding.

    Raises:
        ModelRefusalError: If the model refuses the query.
        TransportError: If the invoker fails.
    """
    return await _search(
        query,
        invoke,
        system_instruction=PRODUCT_SYSTEM_INSTRUCTION,
        shape=PRODUCT_SEARCH_SHAPE,
        list_field="products",
        record_type=ProductRecord,
        kind=Product,
        context=context,
        config=config,
    )


async def search_timeline(
    query: str,
    invoke: Invoker,
    config: FrozenConfig | None = None,
    *,
    context: str = "",
) -> SearchResult:
    """Research the background of a news topic as a dated timeline."""
    return await _search(
        query,
        invoke,
        system_instruction=TIMELINE_SYSTEM_INSTRUCTION,
        shape=TIMELINE_SHAPE,
        list_field="timeline",
        record_type=TimelineEventRecord,
        kind=TimelineEvent,
        context=context,
        config=config,
    )

