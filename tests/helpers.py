from collections.abc import Callable, Iterable

from browser_wand.core.types import FinishState, PromptParts, ResponseEnvelope

type Reply = str | ResponseEnvelope | BaseException


def as_envelope(reply: str | ResponseEnvelope) -> ResponseEnvelope:
    if isinstance(reply, ResponseEnvelope):
        return reply
    return ResponseEnvelope(reply)


class ScriptedInvoker:
    """Fake `Invoker` that replays replies in order and records every prompt.

    A reply may be a plain string, a full `ResponseEnvelope`, or an exception
    instance to raise for that call.
    """

    def __init__(self, replies: Iterable[Reply]):
        self.replies = list(replies)
        self.prompts: list[PromptParts] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def __call__(self, prompt: PromptParts) -> ResponseEnvelope:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError(f"Unexpected call #{len(self.prompts)}")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return as_envelope(reply)


class FunctionInvoker:
    """Fake `Invoker` computing each reply from the prompt."""

    def __init__(self, respond: Callable[[PromptParts, int], Reply]):
        self.respond = respond
        self.prompts: list[PromptParts] = []

    async def __call__(self, prompt: PromptParts) -> ResponseEnvelope:
        self.prompts.append(prompt)
        reply = self.respond(prompt, len(self.prompts))
        if isinstance(reply, BaseException):
            raise reply
        return as_envelope(reply)


def refused(reason: str = "SAFETY") -> ResponseEnvelope:
    return ResponseEnvelope("", FinishState.REFUSED, finish_reason=reason)


def truncated(text: str) -> ResponseEnvelope:
    return ResponseEnvelope(text, FinishState.TRUNCATED, finish_reason="MAX_TOKENS")
