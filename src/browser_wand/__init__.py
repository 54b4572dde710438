"""Resilient structured-output pipeline for model-driven page rewriting."""

import importlib.metadata
import logging

from browser_wand.adapters.gemini import GeminiInvoker, envelope_from_response
from browser_wand.alignment.aligner import (
    AlignmentReport,
    PageAlignmentReport,
    align,
    align_page,
    build_pairs,
)
from browser_wand.config import FrozenConfig, WandSettings, resolve_config
from browser_wand.core.exceptions import (
    AlignmentError,
    BrowserWandError,
    ConfigurationError,
    MalformedOutputError,
    ModelRefusalError,
    TransportError,
)
from browser_wand.core.shapes import (
    PRODUCT_SEARCH_SHAPE,
    PRODUCT_SHAPE,
    TEXT,
    TIMELINE_SHAPE,
    ArrayShape,
    ObjectShape,
    TextShape,
    object_shape,
)
from browser_wand.core.types import (
    AlignmentPair,
    BlockCategory,
    Chunk,
    ContentBlock,
    Entity,
    Failure,
    FinishState,
    GroundingCandidate,
    Invoker,
    ParsedResult,
    Product,
    PromptParts,
    Recovered,
    ResponseEnvelope,
    Result,
    Structured,
    Success,
    TimelineEvent,
    Unparsable,
    payload_of,
)
from browser_wand.grounding.fusion import fuse
from browser_wand.pipeline.batch import (
    BatchTranslator,
    ChunkedProcessor,
    process_in_chunks,
    translate_batches,
)
from browser_wand.pipeline.chunker import batch_list, split
from browser_wand.response.parser import parse, parse_envelope
from browser_wand.response.repair import repair
from browser_wand.telemetry import TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("browser-wand")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Pipeline entry points
    "split",
    "batch_list",
    "process_in_chunks",
    "translate_batches",
    "ChunkedProcessor",
    "BatchTranslator",
    "parse",
    "parse_envelope",
    "repair",
    "fuse",
    "align",
    "align_page",
    "build_pairs",
    # Provider
    "GeminiInvoker",
    "envelope_from_response",
    # Configuration
    "FrozenConfig",
    "WandSettings",
    "resolve_config",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Types
    "AlignmentPair",
    "AlignmentReport",
    "BlockCategory",
    "Chunk",
    "ContentBlock",
    "Entity",
    "FinishState",
    "GroundingCandidate",
    "Invoker",
    "PageAlignmentReport",
    "ParsedResult",
    "Product",
    "PromptParts",
    "Recovered",
    "ResponseEnvelope",
    "Structured",
    "TimelineEvent",
    "Unparsable",
    "payload_of",
    "Result",
    "Success",
    "Failure",
    # Shapes
    "ArrayShape",
    "ObjectShape",
    "TextShape",
    "TEXT",
    "PRODUCT_SHAPE",
    "PRODUCT_SEARCH_SHAPE",
    "TIMELINE_SHAPE",
    "object_shape",
    # Exceptions
    "BrowserWandError",
    "TransportError",
    "ModelRefusalError",
    "MalformedOutputError",
    "AlignmentError",
    "ConfigurationError",
]
