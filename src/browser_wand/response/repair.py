"""Field-level recovery of structured output that was cut off mid-stream.

When a reply stops before its outermost object closes, the parser hands the
partial text here. Each declared field is recovered independently; anything
that cannot be recovered falls back to an empty default, so the payload always
has every declared field with its declared type.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from typing import Any

from browser_wand.core.shapes import (
    ArrayShape,
    FieldKind,
    FieldSpec,
    ObjectShape,
    Shape,
    TextShape,
)
from browser_wand.response.scanner import OBJECT_SCANNER, find_string_end

log = logging.getLogger(__name__)

# Body of a JSON string literal: any non-quote/non-backslash char or an escape pair.
_STRING_BODY = r'(?:[^"\\]|\\.)*'
_KEY_RE = re.compile(r'"([A-Za-z_][\w-]*)"\s*:\s*([\["{])')

# Models often emit raw newlines inside string values.
_LENIENT_DECODER = json.JSONDecoder(strict=False)

_LITERAL_ESCAPES = (
    ('\\"', '"'),
    ("\\n", "\n"),
    ("\\t", "\t"),
    ("\\r", "\r"),
    ("\\/", "/"),
)


@dataclasses.dataclass(frozen=True, slots=True)
class RepairOutcome:
    """Recovered payload plus diagnostics on which fields were found."""

    payload: Any
    recovered: tuple[str, ...] = ()
    defaulted: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.recovered


def unescape_json_string(value: str) -> str:
    """Decode JSON string escapes, falling back to literal substitution."""
    try:
        decoded = _LENIENT_DECODER.decode(f'"{value}"')
    except (json.JSONDecodeError, ValueError):
        pass
    else:
        if isinstance(decoded, str):
            return decoded

    # A cut-off escape at the very end cannot be decoded; drop it.
    if value.endswith("\\") and not value.endswith("\\\\"):
        value = value[:-1]
    placeholder = "\x00"
    text = value.replace("\\\\", placeholder)
    for escaped, literal in _LITERAL_ESCAPES:
        text = text.replace(escaped, literal)
    return text.replace(placeholder, "\\")


def _first_top_level(pattern: re.Pattern[str], text: str) -> re.Match[str] | None:
    """First match whose key sits directly inside the outermost object.

    `text` starts at the object's opening brace, so top-level keys are at
    depth 1; keys of nested objects and of objects inside arrays are deeper.
    """
    depths = OBJECT_SCANNER.depths(text)
    for match in pattern.finditer(text):
        if depths[match.start()] == 1:
            return match
    return None


def _field_value_start(text: str, name: str, opener: str) -> int | None:
    """Return the index of `opener` that begins the value of field `name`."""
    pattern = re.compile(r'"' + re.escape(name) + r'"\s*:\s*' + re.escape(opener))
    match = _first_top_level(pattern, text)
    if match is None:
        return None
    return match.end() - 1


def recover_string_field(text: str, name: str) -> str | None:
    """Recover a scalar string field, even when its closing quote was cut off."""
    pattern = re.compile(
        r'"' + re.escape(name) + r'"\s*:\s*"(' + _STRING_BODY + r')(?:"|\\?$)',
        re.DOTALL,
    )
    match = _first_top_level(pattern, text)
    if match is None:
        return None
    return unescape_json_string(match.group(1))


def recover_object_field(text: str, name: str) -> dict[str, Any] | None:
    """Recover a nested object field, provided it closed before the cut."""
    start = _field_value_start(text, name, "{")
    if start is None:
        return None
    span = OBJECT_SCANNER.span(text, start)
    if span is None:
        return None
    try:
        value = _LENIENT_DECODER.decode(span)
    except json.JSONDecodeError:
        log.debug("Dropping unparsable object field %r: %.60s", name, span)
        return None
    return value if isinstance(value, dict) else None


def recover_object_array(text: str, name: str | None) -> list[Any] | None:
    """Parse every complete object inside the array field `name`.

    With `name=None` the text itself is treated as the array body. Objects that
    fail to parse are dropped; returns None when the array was not found.
    """
    if name is None:
        start = text.find("[")
    else:
        start = _field_value_start(text, name, "[")
    if start is None or start < 0:
        return None

    items: list[Any] = []
    for span in OBJECT_SCANNER.iter_spans(text, start + 1, stop_char="]"):
        try:
            items.append(_LENIENT_DECODER.decode(span))
        except json.JSONDecodeError:
            log.debug("Dropping unparsable object in %r: %.60s", name, span)
    return items


def recover_string_array(text: str, name: str | None) -> list[str] | None:
    """Collect every complete string literal inside the array field `name`."""
    if name is None:
        start = text.find("[")
    else:
        start = _field_value_start(text, name, "[")
    if start is None or start < 0:
        return None

    items: list[str] = []
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "]":
            break
        if ch == '"':
            end = find_string_end(text, i)
            if end is None:
                break
            items.append(unescape_json_string(text[i + 1 : end]))
            i = end + 1
            continue
        i += 1
    return items


def infer_object_shape(text: str) -> ObjectShape:
    """Guess an object shape from the keys visible in partial text.

    Only keys directly inside the outermost object are used; keys of nested
    objects, including objects inside arrays, are skipped. An array value whose
    first element is an object becomes an object array, any other array a
    string array.
    """
    depths = OBJECT_SCANNER.depths(text)
    seen: dict[str, FieldKind] = {}
    for match in _KEY_RE.finditer(text):
        name, opener = match.group(1), match.group(2)
        if name in seen or depths[match.start()] != 1:
            continue
        if opener == '"':
            seen[name] = FieldKind.STRING
        elif opener == "{":
            seen[name] = FieldKind.OBJECT
        elif opener == "[":
            rest = text[match.end() :].lstrip()
            seen[name] = (
                FieldKind.OBJECT_ARRAY if rest.startswith("{") else FieldKind.STRING_ARRAY
            )
    return ObjectShape(tuple(FieldSpec(name, kind) for name, kind in seen.items()))


def _repair_object(text: str, shape: ObjectShape) -> RepairOutcome:
    payload: dict[str, Any] = {}
    recovered: list[str] = []
    defaulted: list[str] = []

    for spec in shape.fields:
        value: Any
        match spec.kind:
            case FieldKind.STRING:
                value = recover_string_field(text, spec.name)
            case FieldKind.OBJECT:
                value = recover_object_field(text, spec.name)
            case FieldKind.OBJECT_ARRAY:
                value = recover_object_array(text, spec.name)
            case FieldKind.STRING_ARRAY:
                value = recover_string_array(text, spec.name)

        if value is None:
            payload[spec.name] = spec.kind.empty()
            defaulted.append(spec.name)
        else:
            payload[spec.name] = value
            recovered.append(spec.name)

    return RepairOutcome(payload, tuple(recovered), tuple(defaulted))


def _repair_array(text: str) -> RepairOutcome:
    body = text.lstrip()
    if not body.startswith("["):
        return RepairOutcome([], (), ("items",))
    first = body[1:].lstrip()[:1]
    if first == "{":
        items: list[Any] = recover_object_array(body, None) or []
    else:
        items = recover_string_array(body, None) or []
    if items:
        return RepairOutcome(items, ("items",), ())
    return RepairOutcome(items, (), ("items",))


def repair(partial_text: str, shape: Shape | None = None) -> RepairOutcome:
    """Recover what can be recovered from `partial_text` given the expected shape.

    Args:
        partial_text: Text starting at the structure's opening character.
        shape: Expected shape; None infers an object shape from visible keys.

    Returns:
        A `RepairOutcome` whose payload is always structurally valid.
    """
    match shape:
        case ArrayShape():
            outcome = _repair_array(partial_text)
        case ObjectShape():
            outcome = _repair_object(partial_text, shape)
        case TextShape():
            outcome = RepairOutcome(partial_text.strip(), ("text",), ())
        case _:
            if partial_text.lstrip().startswith("["):
                outcome = _repair_array(partial_text)
            else:
                outcome = _repair_object(partial_text, infer_object_shape(partial_text))

    log.debug(
        "Truncation repair recovered=%s defaulted=%s",
        outcome.recovered,
        outcome.defaulted,
    )
    return outcome
