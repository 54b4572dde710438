"""Parsing of page-modification replies (script, stylesheet, explanation)."""

from __future__ import annotations

from dataclasses import dataclass

from browser_wand.core.shapes import MODIFICATION_SHAPE
from browser_wand.core.types import payload_of
from browser_wand.response.parser import parse

DEFAULT_EXPLANATION = "Modifications applied."


@dataclass(frozen=True, slots=True)
class Modification:
    code: str = ""
    css: str = ""
    explanation: str = DEFAULT_EXPLANATION


def parse_modification(raw_text: str) -> Modification:
    """Extract script, CSS and explanation from a modification reply.

    The script may arrive as `javascript` or `code`. When the reply has no
    usable object, it is returned whole as the explanation.
    """
    payload = payload_of(parse(raw_text, MODIFICATION_SHAPE))
    if not isinstance(payload, dict):
        return Modification(explanation=raw_text)
    return Modification(
        code=str(payload.get("javascript") or payload.get("code") or ""),
        css=str(payload.get("css") or ""),
        explanation=str(payload.get("explanation") or DEFAULT_EXPLANATION),
    )
