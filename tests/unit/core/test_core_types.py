import pytest

from browser_wand.core.exceptions import (
    AlignmentError,
    BrowserWandError,
    ConfigurationError,
    ModelRefusalError,
)
from browser_wand.core.shapes import PRODUCT_SHAPE, FieldKind, object_shape
from browser_wand.core.types import (
    AlignmentPair,
    Chunk,
    ContentBlock,
    Entity,
    GroundingCandidate,
    LiveBlock,
    Product,
    ResponseEnvelope,
)

pytestmark = pytest.mark.unit


def test_chunk_validates_offsets_against_text():
    Chunk("abc", 2, 5)
    with pytest.raises(ValueError, match="offsets"):
        Chunk("", 3, 3)
    with pytest.raises(ValueError, match="text"):
        Chunk("abc", 0, 4)


def test_envelope_freezes_candidates_and_rejects_non_text():
    envelope = ResponseEnvelope("hi", grounding_candidates=[GroundingCandidate("https://a.com/x")])
    assert isinstance(envelope.grounding_candidates, tuple)
    assert not envelope.is_refused
    with pytest.raises(TypeError):
        ResponseEnvelope(None)


def test_grounding_candidate_needs_a_uri():
    with pytest.raises(ValueError, match="uri"):
        GroundingCandidate("  ")


def test_entities_need_a_title():
    with pytest.raises(ValueError, match="title"):
        Product(" ", price="$1")
    assert Entity("Lamp").url == ""


def test_pair_can_only_be_consumed_once():
    pair = AlignmentPair("Hello", "Bonjour")
    pair.consume()
    assert pair.consumed
    with pytest.raises(AlignmentError):
        pair.consume()


def test_content_block_is_a_live_block():
    block = ContentBlock("Hello")
    assert isinstance(block, LiveBlock)
    block.apply_translation("Bonjour")
    assert block.processed and block.translation == "Bonjour"


def test_refusal_message_includes_reason():
    error = ModelRefusalError("SAFETY")
    assert isinstance(error, BrowserWandError)
    assert str(error) == "Model refused the request: SAFETY"
    assert str(ModelRefusalError()) == "Model refused the request"


def test_configuration_error_is_also_a_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_object_shape_builder_and_defaults():
    shape = object_shape("summary", ("items", FieldKind.OBJECT_ARRAY))
    assert shape.field_names == ("summary", "items")
    assert shape.defaults() == {"summary": "", "items": []}
    assert PRODUCT_SHAPE.open_char == "{"
