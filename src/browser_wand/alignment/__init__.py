"""Placement of translated text onto live content blocks."""

from .aligner import (
    AlignmentReport,
    PageAlignmentReport,
    align,
    align_page,
    build_pairs,
)

__all__ = [
    "AlignmentReport",
    "PageAlignmentReport",
    "align",
    "align_page",
    "build_pairs",
]
