"""Configuration schema and validation using Pydantic.

Validates and coerces configuration values from every source (environment,
pyproject.toml, programmatic overrides) and owns the defaults. The pipeline's
empirically tuned thresholds live here as named fields so they can be
recalibrated without touching the algorithms that use them.
"""

from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WandSettings(BaseSettings):
    """Pydantic settings schema, read from `BROWSER_WAND_*` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BROWSER_WAND_",
        env_file=None,  # .env files are loaded explicitly by the resolver
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Model access ---

    api_key: str | None = Field(default=None, description="Gemini API key")
    model: str = Field(default="gemini-2.5-flash", min_length=1)
    max_output_tokens: int = Field(default=4096, ge=1)
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    request_timeout_seconds: float | None = Field(
        default=None, gt=0, description="Caller-level timeout for a whole request"
    )

    # --- Chunking and batching ---

    max_chunk_size: int = Field(default=8000, ge=1)
    chunk_overlap: int = Field(default=200, ge=0)
    max_chunks_per_request: int = Field(default=10, ge=1)
    translation_batch_size: int = Field(default=15, ge=1)
    translation_placeholder: str = "[unavailable]"
    section_placeholder: str = "[section unavailable]"

    # --- Grounding fusion ---

    grounding_min_score: int = Field(default=3, ge=0)
    grounding_exact_source_points: int = Field(default=10, ge=0)
    grounding_partial_source_points: int = Field(default=5, ge=0)
    grounding_token_points: int = Field(default=2, ge=0)
    grounding_min_token_length: int = Field(
        default=4, ge=1, description="Title tokens shorter than this are ignored"
    )
    max_results: int = Field(default=10, ge=1)

    # --- Text alignment and block extraction ---

    alignment_min_similarity: float = Field(default=0.5, ge=0.0, le=1.0)
    min_heading_length: int = Field(default=5, ge=0)
    min_paragraph_length: int = Field(default=30, ge=0)
    max_headings: int = Field(default=15, ge=0)
    max_paragraphs: int = Field(default=35, ge=0)

    @model_validator(mode="after")
    def validate_overlap(self) -> "WandSettings":
        """Overlap must be smaller than the chunk size to guarantee progress."""
        if self.chunk_overlap >= self.max_chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"max_chunk_size ({self.max_chunk_size})"
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary of field values."""
        return self.model_dump()


def schema_defaults() -> dict[str, Any]:
    """Return the declared defaults without reading the environment."""
    return {
        name: field.get_default(call_default_factory=True)
        for name, field in WandSettings.model_fields.items()
    }
