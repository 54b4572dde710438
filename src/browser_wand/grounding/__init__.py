"""Reconciliation of model-written entities with search grounding."""

from .fusion import fuse, normalize_source_name, score_candidate, significant_tokens

__all__ = ["fuse", "normalize_source_name", "score_candidate", "significant_tokens"]
