"""Configuration data types, following the resolve-once, freeze-then-flow pattern."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Literal, NamedTuple

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to every pipeline component.

    Field meanings and defaults are documented on `WandSettings`.
    """

    api_key: str | None
    model: str
    max_output_tokens: int
    temperature: float
    request_timeout_seconds: float | None
    max_chunk_size: int
    chunk_overlap: int
    max_chunks_per_request: int
    translation_batch_size: int
    translation_placeholder: str
    section_placeholder: str
    grounding_min_score: int
    grounding_exact_source_points: int
    grounding_partial_source_points: int
    grounding_token_points: int
    grounding_min_token_length: int
    max_results: int
    alignment_min_similarity: float
    min_heading_length: int
    min_paragraph_length: int
    max_headings: int
    max_paragraphs: int

    def __repr__(self) -> str:
        """Representation with the API key redacted for safe logging."""
        values = asdict(self)
        values["api_key"] = "[REDACTED]" if self.api_key else None
        body = ", ".join(f"{k}={v!r}" for k, v in values.items())
        return f"FrozenConfig({body})"

    __str__ = __repr__

    def with_overrides(self, **overrides: Any) -> "FrozenConfig":
        """Return a copy with known fields replaced; unknown names are ignored."""
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known})


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing."""

    values: FrozenConfig
    origin: SourceMap

    def __repr__(self) -> str:
        return f"ResolvedConfig(values={self.values!r}, origin={dict(self.origin)!r})"

    def to_frozen(self) -> FrozenConfig:
        """Return the immutable configuration used in the pipeline."""
        return self.values

    def audit(self) -> str:
        """Report where each field came from, with the API key redacted."""
        lines = []
        for name, origin in sorted(self.origin.items()):
            value = getattr(self.values, name, None)
            if name == "api_key":
                shown = "None" if value is None else "<redacted>"
            elif origin == "env":
                shown = f"BROWSER_WAND_{name.upper()}={value}"
            else:
                shown = repr(value)
            lines.append(f"{name}: {origin}:{shown}")
        return "\n".join(lines)
