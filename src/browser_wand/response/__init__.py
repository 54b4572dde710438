"""Parsing and repair of free-form model replies."""

from .parser import parse, parse_envelope, strip_code_fence
from .repair import RepairOutcome, repair

__all__ = ["RepairOutcome", "parse", "parse_envelope", "repair", "strip_code_fence"]
