"""Structured response parsing for free-form model replies.

Replies are frequently wrapped in Markdown fences, surrounded by prose, or cut
off by an output-length limit. `parse` works through those cases in order:

1. strip one enclosing code fence,
2. find the first opening `{`/`[` and scan to its balanced close,
3. `json.loads` the bounded span (trailing prose is ignored),
4. hand unbalanced or malformed spans to truncation repair,
5. for arrays with no opening bracket at all, fall back to numbered-list
   and line-based extraction.

`parse` never raises; when nothing usable is found it returns `Unparsable`
carrying the raw text.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
import json
import logging
import re
from typing import Any

from browser_wand.core.exceptions import ModelRefusalError
from browser_wand.core.shapes import ArrayShape, ObjectShape, Shape, TextShape
from browser_wand.core.types import (
    ParsedResult,
    Recovered,
    ResponseEnvelope,
    Structured,
    Unparsable,
)
from browser_wand.response.repair import repair
from browser_wand.response.scanner import scanner_for

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
_FIRST_BRACKETED_RE = re.compile(r"\[[\s\S]*?\]")
_NUMBERED_ITEM_RE = re.compile(r"^\s*(\d+)[.)]\s*(.+)")
_BOLD_RE = re.compile(r"^\*\*(.+?)\*\*$")
_QUOTED_RE = re.compile(r"""^["'](.+)["']$""")

_DECODER = json.JSONDecoder(strict=False)


def strip_code_fence(text: str) -> str:
    """Remove one code fence wrapping the whole (stripped) text, if present."""
    trimmed = text.strip()
    match = _FENCE_RE.match(trimmed)
    if match:
        return match.group(1).strip()
    return trimmed


def _loads(text: str) -> Any:
    return _DECODER.decode(text)


def _find_opening(text: str, shape: Shape | None) -> tuple[int, str] | None:
    """Locate the first structural opening character for the shape."""
    if isinstance(shape, ObjectShape | ArrayShape):
        index = text.find(shape.open_char)
        return (index, shape.open_char) if index != -1 else None

    positions = [(text.find(ch), ch) for ch in "{["]
    found = [(i, ch) for i, ch in positions if i != -1]
    return min(found) if found else None


# --- Object payloads ---


def _parse_structure(raw_text: str, text: str, shape: ObjectShape | None) -> ParsedResult:
    opening = _find_opening(text, shape)
    if opening is None:
        return Unparsable(raw_text)
    start, open_char = opening
    if shape is None and open_char == "[":
        return _parse_array(raw_text, text, ArrayShape())

    span = scanner_for(open_char).span(text, start)
    if span is not None:
        try:
            return Structured(_loads(span))
        except json.JSONDecodeError as e:
            log.debug("Balanced span failed to parse (%s); trying repair", e)

    outcome = repair(text[start:], shape)
    if outcome.is_empty:
        return Unparsable(raw_text)
    return Recovered(outcome.payload, outcome.recovered, outcome.defaulted)


# --- Array payloads ---


def _clean_list_item(content: str) -> str:
    content = content.strip()
    bold = _BOLD_RE.match(content)
    if bold:
        content = bold.group(1)
    quoted = _QUOTED_RE.match(content)
    if quoted:
        content = quoted.group(1)
    return content.strip()


def _numbered_items(text: str) -> list[str]:
    items = []
    for line in text.split("\n"):
        match = _NUMBERED_ITEM_RE.match(line)
        if match:
            content = _clean_list_item(match.group(2))
            if content:
                items.append(content)
    return items


def _plain_lines(text: str) -> list[str]:
    lines = (line.strip() for line in text.split("\n"))
    return [
        line
        for line in lines
        if line and not line.startswith("#") and not line.startswith("```")
    ]


def _array_candidates(text: str, shape: ArrayShape) -> Iterator[ParsedResult]:
    """Yield candidate results in strict precedence order, lazily."""
    opening = _find_opening(text, shape)
    start = opening[0] if opening else None

    json_strategies: list[tuple[str, Callable[[], Any]]] = []
    if start is not None:
        json_strategies.append(
            ("balanced_scan", lambda: scanner_for("[").span(text, start))
        )
    json_strategies.append(("whole_text", lambda: text))
    json_strategies.append(
        (
            "first_bracketed",
            lambda: (m.group(0) if (m := _FIRST_BRACKETED_RE.search(text)) else None),
        )
    )

    for method, source in json_strategies:
        candidate = source()
        if candidate is None:
            continue
        try:
            value = _loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(value, list):
            yield Structured(value, method=method)

    # Prose fallbacks apply only to replies with no opening bracket.
    if start is not None:
        outcome = repair(text[start:], shape)
        if not outcome.is_empty:
            yield Recovered(outcome.payload, outcome.recovered, outcome.defaulted)
        return

    numbered = _numbered_items(text)
    if numbered:
        yield Recovered(numbered, ("items",), method="numbered_list")

    lines = _plain_lines(text)
    if lines:
        if shape.expected_count is not None:
            lines = lines[: shape.expected_count]
        yield Recovered(lines, ("items",), method="line_split")


def _parse_array(raw_text: str, text: str, shape: ArrayShape) -> ParsedResult:
    expected = shape.expected_count
    fallback: ParsedResult | None = None

    for candidate in _array_candidates(text, shape):
        items = candidate.payload
        if expected is None or len(items) >= expected:
            log.debug("Array parsed via %s (%d items)", candidate.method, len(items))
            return candidate
        if fallback is None and items:
            fallback = candidate

    if fallback is not None:
        log.debug(
            "No strategy produced %s items; best effort via %s",
            expected,
            fallback.method,
        )
        return fallback
    return Unparsable(raw_text)


# --- Public API ---


def _parse(raw_text: str, shape: Shape | None) -> ParsedResult:
    text = strip_code_fence(raw_text)
    match shape:
        case TextShape():
            return Structured(text, method="text") if text else Unparsable(raw_text)
        case ArrayShape():
            return _parse_array(raw_text, text, shape)
        case _:
            return _parse_structure(raw_text, text, shape)


def parse(raw_text: str, shape: Shape | None = None) -> ParsedResult:
    """Extract a structured payload from a model reply.

    Args:
        raw_text: The reply text, possibly fenced, prose-wrapped or truncated.
        shape: Expected payload shape. None accepts whichever of an object or
            array appears first.

    Returns:
        `Structured`, `Recovered` or `Unparsable`; this function never raises.
    """
    if not isinstance(raw_text, str):
        raw_text = "" if raw_text is None else str(raw_text)
    try:
        return _parse(raw_text, shape)
    except (RecursionError, ValueError, TypeError) as e:
        log.warning("Parser failed unexpectedly: %s", e, exc_info=True)
        return Unparsable(raw_text, error=str(e))


def parse_envelope(envelope: ResponseEnvelope, shape: Shape | None = None) -> ParsedResult:
    """Parse a model reply, honoring its finish state.

    Raises:
        ModelRefusalError: When the model refused to answer.
    """
    if envelope.is_refused:
        log.error("Model refused the request (reason=%s)", envelope.finish_reason)
        raise ModelRefusalError(envelope.finish_reason)

    result = parse(envelope.raw_text, shape)
    if envelope.is_truncated:
        log.warning("Reply was truncated; parsed as %s", type(result).__name__)
        # A cut-off prose reply is incomplete even though it "parsed".
        if isinstance(result, Structured) and isinstance(shape, TextShape):
            return Recovered(result.payload, ("text",), method="truncated_text")
    return result
