"""Gemini provider adapter.

Maps `google-genai` responses onto `ResponseEnvelope` and exposes an async
`Invoker` over `client.aio.models.generate_content`. The SDK is imported on
first use so the rest of the package works without it.
"""

from __future__ import annotations

import logging
from typing import Any

from browser_wand.config import FrozenConfig, default_config
from browser_wand.core.exceptions import ConfigurationError, TransportError
from browser_wand.core.types import (
    FinishState,
    GroundingCandidate,
    PromptParts,
    ResponseEnvelope,
)

log = logging.getLogger(__name__)

REFUSAL_REASONS = frozenset(
    {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}
)
TRUNCATION_REASONS = frozenset({"MAX_TOKENS"})


def _reason_name(value: Any) -> str | None:
    """Normalize an SDK enum or string reason to its bare upper-case name."""
    if value is None:
        return None
    name = getattr(value, "name", None) or str(value)
    return name.rsplit(".", 1)[-1].upper()


def _finish_state(reason: str | None) -> FinishState:
    if reason in REFUSAL_REASONS:
        return FinishState.REFUSED
    if reason in TRUNCATION_REASONS:
        return FinishState.TRUNCATED
    return FinishState.COMPLETE


def _candidate_text(candidate: Any) -> str:
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or ()
    return "".join(
        part.text
        for part in parts
        if getattr(part, "text", None) and not getattr(part, "thought", False)
    )


def _grounding_candidates(candidate: Any) -> tuple[GroundingCandidate, ...]:
    metadata = getattr(candidate, "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or ()
    found = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if not uri:
            continue
        title = getattr(web, "title", None) or ""
        domain = getattr(web, "domain", None) or ""
        found.append(GroundingCandidate(uri, title, domain or title))
    return tuple(found)


def envelope_from_response(response: Any) -> ResponseEnvelope:
    """Convert a `GenerateContentResponse` (or a look-alike) to an envelope."""
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = _reason_name(getattr(feedback, "block_reason", None))
    if block_reason:
        return ResponseEnvelope(
            "", FinishState.REFUSED, finish_reason=f"PROMPT_{block_reason}"
        )

    candidates = getattr(response, "candidates", None) or ()
    if not candidates:
        log.warning("Response has no candidates")
        return ResponseEnvelope("", FinishState.COMPLETE)

    first = candidates[0]
    reason = _reason_name(getattr(first, "finish_reason", None))
    state = _finish_state(reason)
    if state is FinishState.TRUNCATED:
        log.warning("Response stopped at the output token limit")

    return ResponseEnvelope(
        _candidate_text(first),
        state,
        _grounding_candidates(first),
        finish_reason=reason,
    )


class GeminiInvoker:
    """Async `Invoker` backed by the google-genai client.

    Example:
        invoke = GeminiInvoker(resolve_config(), use_search=True)
        envelope = await invoke(PromptParts("Find red running shoes"))
    """

    def __init__(
        self,
        config: FrozenConfig | None = None,
        client: Any | None = None,
        *,
        use_search: bool = False,
    ) -> None:
        self.config = config or default_config()
        self._client = client
        self.use_search = use_search

    @property
    def client(self) -> Any:
        if self._client is None:
            from google import genai

            try:
                self._client = genai.Client(api_key=self.config.api_key)
            except ValueError as e:
                raise ConfigurationError(f"Cannot create Gemini client: {e}") from e
        return self._client

    def _generation_config(self, prompt: PromptParts) -> Any:
        from google.genai import types

        tools = [types.Tool(google_search=types.GoogleSearch())] if self.use_search else None
        return types.GenerateContentConfig(
            system_instruction=prompt.system_instruction or None,
            max_output_tokens=self.config.max_output_tokens,
            temperature=self.config.temperature,
            tools=tools,
        )

    async def __call__(self, prompt: PromptParts) -> ResponseEnvelope:
        client = self.client
        try:
            response = await client.aio.models.generate_content(
                model=self.config.model,
                contents=prompt.user_message,
                config=self._generation_config(prompt),
            )
        except Exception as e:
            raise TransportError(f"Gemini request failed: {e}") from e
        return envelope_from_response(response)

    def __repr__(self) -> str:
        return f"GeminiInvoker(model={self.config.model!r}, use_search={self.use_search})"
