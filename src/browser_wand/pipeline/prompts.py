"""Default prompt builders for chunked processing and batch translation.

Builders are small frozen objects so callers can swap wording without touching
the batching logic. Each returns a `PromptParts` ready for an invoker.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import json

from browser_wand.core.types import PromptParts

SUMMARY_SYSTEM_INSTRUCTION = """You are an expert content summarizer. Create concise, informative summaries that capture the key points and main ideas.

RULES:
1. Focus on the main ideas and key takeaways
2. Use clear, concise language
3. Preserve important facts, figures, and conclusions
4. Keep the summary proportional to the content length
5. Return plain text only; do not wrap the response in code blocks"""

COMBINE_SYSTEM_INSTRUCTION = """You are an expert content summarizer. Combine the following section results into one coherent, comprehensive answer.

RULES:
1. Merge overlapping information and remove redundancies
2. Maintain logical flow and structure
3. Use bullet points or numbered lists where appropriate
4. Keep the same output format the sections use"""

TRANSLATION_SYSTEM_INSTRUCTION = """You are a professional translator. Translate the given text blocks to {language}.

CRITICAL RULES:
1. Maintain the original meaning and tone
2. Keep proper nouns and technical terms appropriately
3. Return ONLY a valid JSON array of translated strings, with no other text
4. Each translation must correspond to the input text block at the same index
5. The number of translations MUST equal the number of input texts ({count} items)

REQUIRED OUTPUT FORMAT:
["translation 1", "translation 2", "translation 3"]"""


@dataclass(frozen=True, slots=True)
class ChunkPrompts:
    """Builds per-chunk and reduce prompts for one long document.

    Attributes:
        request: What the caller wants done with the document.
        system_instruction: Instruction sent with every chunk.
        combine_instruction: Instruction sent with the reduce call.
    """

    request: str = "Summarize this content."
    system_instruction: str = SUMMARY_SYSTEM_INSTRUCTION
    combine_instruction: str = COMBINE_SYSTEM_INSTRUCTION

    def single(self, text: str) -> PromptParts:
        """Prompt for a document that fits in one chunk."""
        return PromptParts(
            f"{self.request}\n\nCONTENT:\n{text}", self.system_instruction
        )

    def chunk(self, text: str, index: int, total: int) -> PromptParts:
        """Prompt for chunk `index` (zero-based) of `total`."""
        if total == 1:
            return self.single(text)
        return PromptParts(
            f"{self.request}\nThis is section {index + 1} of {total}.\n\nCONTENT:\n{text}",
            self.system_instruction,
        )

    def reduce(self, sections: str) -> PromptParts:
        """Prompt combining already-rendered section outputs."""
        return PromptParts(
            f"Original request: {self.request}\n\nSECTION RESULTS:\n{sections}\n\n"
            "Combine these into a single result:",
            self.combine_instruction,
        )


@dataclass(frozen=True, slots=True)
class TranslationPrompts:
    """Builds the prompt for one translation batch."""

    target_language: str = "English"

    def batch(self, items: Sequence[str]) -> PromptParts:
        count = len(items)
        return PromptParts(
            f"Translate these {count} text blocks to {self.target_language}. "
            f"Return ONLY a JSON array with exactly {count} translated strings:\n\n"
            f"{json.dumps(list(items), ensure_ascii=False)}",
            TRANSLATION_SYSTEM_INSTRUCTION.format(
                language=self.target_language, count=count
            ),
        )
