"""Gemini adapter: response mapping and invoker behavior, with SDK fakes."""

from types import SimpleNamespace

import pytest

from browser_wand.adapters.gemini import GeminiInvoker, envelope_from_response
from browser_wand.core.exceptions import TransportError
from browser_wand.core.types import FinishState, PromptParts

pytestmark = pytest.mark.unit


def _part(text, thought=False):
    return SimpleNamespace(text=text, thought=thought)


def _response(parts=(), finish_reason="STOP", chunks=(), block_reason=None):
    candidate = SimpleNamespace(
        content=SimpleNamespace(parts=list(parts)),
        finish_reason=SimpleNamespace(name=finish_reason) if finish_reason else None,
        grounding_metadata=SimpleNamespace(grounding_chunks=list(chunks)),
    )
    return SimpleNamespace(
        candidates=[candidate],
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
    )


def _web(uri, title="", domain=""):
    return SimpleNamespace(web=SimpleNamespace(uri=uri, title=title, domain=domain))


def test_text_parts_are_joined_and_thoughts_dropped():
    envelope = envelope_from_response(
        _response([_part("thinking...", thought=True), _part("Hello "), _part("world")])
    )
    assert envelope.raw_text == "Hello world"
    assert envelope.finish_state is FinishState.COMPLETE
    assert envelope.finish_reason == "STOP"


@pytest.mark.parametrize(
    ("reason", "state"),
    [
        ("MAX_TOKENS", FinishState.TRUNCATED),
        ("SAFETY", FinishState.REFUSED),
        ("RECITATION", FinishState.REFUSED),
        ("STOP", FinishState.COMPLETE),
        ("FinishReason.MAX_TOKENS", FinishState.TRUNCATED),
    ],
)
def test_finish_reasons_map_to_states(reason, state):
    assert envelope_from_response(_response([_part("x")], reason)).finish_state is state


def test_grounding_chunks_become_candidates():
    envelope = envelope_from_response(
        _response(
            [_part("ok")],
            chunks=[
                _web("https://a.example/1", "Red Shoes - Shop", "shop.example"),
                _web("https://b.example/2", "News"),
                _web(None, "no uri"),
                SimpleNamespace(web=None),
            ],
        )
    )
    assert [(c.uri, c.source_name) for c in envelope.grounding_candidates] == [
        ("https://a.example/1", "shop.example"),
        ("https://b.example/2", "News"),
    ]


def test_blocked_prompt_is_refused():
    envelope = envelope_from_response(_response(block_reason="SAFETY"))
    assert envelope.is_refused
    assert envelope.finish_reason == "PROMPT_SAFETY"


def test_no_candidates_is_empty_reply():
    envelope = envelope_from_response(SimpleNamespace(candidates=None, prompt_feedback=None))
    assert envelope.raw_text == ""
    assert envelope.finish_state is FinishState.COMPLETE


class FakeModels:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


def _client(result):
    models = FakeModels(result)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models


@pytest.mark.asyncio
async def test_invoker_sends_prompt_and_maps_reply(config):
    client, models = _client(_response([_part("answer")]))
    invoke = GeminiInvoker(config, client)

    envelope = await invoke(PromptParts("question", system_instruction="be brief"))

    assert envelope.raw_text == "answer"
    call = models.calls[0]
    assert call["model"] == config.model
    assert call["contents"] == "question"
    assert call["config"].system_instruction == "be brief"
    assert call["config"].tools is None


@pytest.mark.asyncio
async def test_search_invoker_enables_google_search(config):
    client, models = _client(_response([_part("answer")]))
    await GeminiInvoker(config, client, use_search=True)(PromptParts("q"))
    tools = models.calls[0]["config"].tools
    assert len(tools) == 1
    assert tools[0].google_search is not None


@pytest.mark.asyncio
async def test_sdk_errors_become_transport_errors(config):
    client, _ = _client(ConnectionError("reset by peer"))
    with pytest.raises(TransportError, match="reset by peer"):
        await GeminiInvoker(config, client)(PromptParts("q"))


def test_repr_shows_model_not_key(config):
    invoke = GeminiInvoker(config.with_overrides(api_key="secret"), client=object())
    assert "secret" not in repr(invoke)
    assert config.model in repr(invoke)
