import pytest

from browser_wand.core.exceptions import TransportError
from browser_wand.tasks.summarize import compose_document, summarize_page
from tests.helpers import ScriptedInvoker

pytestmark = pytest.mark.unit


def test_compose_document_adds_title_and_source():
    doc = compose_document("Body text", "My Page", "https://example.com")
    assert doc == "# My Page\n\nSource: https://example.com\n\n---\n\nBody text"
    assert compose_document("Body").startswith("# Page Content\n\n---")


@pytest.mark.asyncio
async def test_short_page_is_summarized_in_one_call(config):
    invoke = ScriptedInvoker(["```markdown\n- point one\n```"])
    summary = await summarize_page("A short page.", invoke, config, request="List key points.")
    assert summary == "- point one"
    assert invoke.prompts[0].user_message.startswith("List key points.")


@pytest.mark.asyncio
async def test_long_page_is_chunked_and_combined(config):
    cfg = config.with_overrides(max_chunk_size=80, chunk_overlap=0)
    page = "A" * 60 + "\n\n" + "B" * 60
    invoke = ScriptedInvoker(["part one", "part two", "combined summary"])

    summary = await summarize_page(page, invoke, cfg)

    assert summary == "combined summary"
    assert "This is section 2 of 2." in invoke.prompts[1].user_message


@pytest.mark.asyncio
async def test_failed_combine_returns_joined_sections(config):
    cfg = config.with_overrides(max_chunk_size=80, chunk_overlap=0)
    page = "A" * 60 + "\n\n" + "B" * 60
    invoke = ScriptedInvoker(["part one", "part two", TransportError("down")])

    summary = await summarize_page(page, invoke, cfg)

    assert "--- Section 1 ---\npart one" in summary
    assert "--- Section 2 ---\npart two" in summary
