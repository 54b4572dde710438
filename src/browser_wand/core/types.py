"""Core data types that flow through the structured-output pipeline.

Model replies, chunks, grounding references and entities are immutable value
objects. The two exceptions are `AlignmentPair` and `ContentBlock`, which carry
the one-shot `consumed`/`processed` flags that alignment flips exactly once.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
import dataclasses
import enum
import typing

from browser_wand.core.exceptions import AlignmentError, MalformedOutputError

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad ---
# Handler-style classes return these instead of raising so callers can treat
# failures as part of the data flow.


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failure, containing the error."""

    error: TFailure


type Result[TSuccess, TFailure] = Success[TSuccess] | Failure[TFailure]

# --- Model replies ---


class FinishState(str, enum.Enum):
    """How a model reply ended."""

    COMPLETE = "complete"
    TRUNCATED = "truncated"
    REFUSED = "refused"


@dataclasses.dataclass(frozen=True, slots=True)
class GroundingCandidate:
    """An independently sourced reference (search grounding), trusted for URIs."""

    uri: str
    title: str = ""
    source_name: str = ""

    def __post_init__(self) -> None:
        """Validate that the reference points somewhere."""
        _require(
            condition=isinstance(self.uri, str) and self.uri.strip() != "",
            message="must be a non-empty str",
            field_name="uri",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    """One model reply, created per call and discarded after parsing."""

    raw_text: str
    finish_state: FinishState = FinishState.COMPLETE
    grounding_candidates: tuple[GroundingCandidate, ...] = ()
    finish_reason: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants and freeze the candidate sequence."""
        _require(
            condition=isinstance(self.raw_text, str),
            message="must be str",
            field_name="raw_text",
            exc=TypeError,
        )
        if not isinstance(self.grounding_candidates, tuple):
            object.__setattr__(
                self, "grounding_candidates", tuple(self.grounding_candidates)
            )

    @property
    def is_refused(self) -> bool:
        return self.finish_state is FinishState.REFUSED

    @property
    def is_truncated(self) -> bool:
        return self.finish_state is FinishState.TRUNCATED


@dataclasses.dataclass(frozen=True, slots=True)
class PromptParts:
    """The prompt handed to the model invoker for a single call."""

    user_message: str
    system_instruction: str = ""


type Invoker = Callable[[PromptParts], Awaitable[ResponseEnvelope]]

# --- Parsed results (tagged variants) ---


@dataclasses.dataclass(frozen=True, slots=True)
class Structured:
    """A payload parsed cleanly from a balanced structure."""

    payload: typing.Any
    method: str = "balanced_scan"


@dataclasses.dataclass(frozen=True, slots=True)
class Recovered:
    """A payload rebuilt field-by-field from partial output."""

    payload: typing.Any
    recovered_fields: tuple[str, ...] = ()
    defaulted_fields: tuple[str, ...] = ()
    method: str = "truncation_repair"


@dataclasses.dataclass(frozen=True, slots=True)
class Unparsable:
    """No structure could be extracted; the raw text is still available."""

    raw_text: str
    error: str | None = None


type ParsedResult = Structured | Recovered | Unparsable


def payload_of(result: ParsedResult) -> typing.Any | None:
    """Return the payload of a parsed result, or None when unparsable."""
    match result:
        case Structured(payload=payload) | Recovered(payload=payload):
            return payload
        case _:
            return None


def require_payload(result: ParsedResult) -> typing.Any:
    """Return the payload or raise `MalformedOutputError` for unparsable results."""
    if isinstance(result, Unparsable):
        raise MalformedOutputError(result.raw_text)
    return result.payload


# --- Chunking ---


@dataclasses.dataclass(frozen=True, slots=True)
class Chunk:
    """A bounded slice `source[start_offset:end_offset]` of a larger text."""

    text: str
    start_offset: int
    end_offset: int

    def __post_init__(self) -> None:
        """Validate offsets against the chunk text."""
        _require(
            condition=0 <= self.start_offset < self.end_offset,
            message=f"invalid range [{self.start_offset}, {self.end_offset})",
            field_name="offsets",
        )
        _require(
            condition=len(self.text) == self.end_offset - self.start_offset,
            message="length must match the offset range",
            field_name="text",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class BatchJob[T]:
    """Ordered pieces of work plus the size (and overlap) used to produce them."""

    pieces: tuple[T, ...]
    size: int
    overlap: int = 0

    def __len__(self) -> int:
        return len(self.pieces)

    def __iter__(self) -> Iterator[T]:
        return iter(self.pieces)


# --- Entities ---


@dataclasses.dataclass(frozen=True, slots=True)
class Entity:
    """A model-asserted item; `url`/`source_name` may be filled by fusion."""

    title: str
    description: str = ""
    url: str = ""
    source_name: str = ""

    def __post_init__(self) -> None:
        """Entities must at least carry a title."""
        _require(
            condition=isinstance(self.title, str) and self.title.strip() != "",
            message="must be a non-empty str",
            field_name="title",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class Product(Entity):
    """A product found by a shopping-style search."""

    price: str = ""
    image_url: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class TimelineEvent(Entity):
    """A dated event in a news timeline."""

    date: str = ""


# --- Alignment ---


class BlockCategory(str, enum.Enum):
    """Categories of live content blocks, in alignment order."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"


@dataclasses.dataclass(slots=True)
class AlignmentPair:
    """An original/translated unit awaiting placement on a live block."""

    original: str
    translated: str
    consumed: bool = False

    def consume(self) -> None:
        """Mark the pair as placed; a pair can only be placed once."""
        if self.consumed:
            raise AlignmentError(f"Pair already consumed: {self.original[:40]!r}")
        self.consumed = True


@typing.runtime_checkable
class LiveBlock(typing.Protocol):
    """A block of original page text that can receive a translation."""

    text: str
    processed: bool

    def apply_translation(self, translated: str) -> None: ...


@dataclasses.dataclass(slots=True)
class ContentBlock:
    """Plain in-memory `LiveBlock`; rendering is left to the caller."""

    text: str
    category: BlockCategory = BlockCategory.PARAGRAPH
    processed: bool = False
    translation: str | None = None

    def apply_translation(self, translated: str) -> None:
        self.translation = translated
        self.processed = True
