import pytest

from browser_wand.tasks.modify import Modification, parse_modification

pytestmark = pytest.mark.unit


def test_full_reply():
    raw = (
        "```json\n"
        '{"javascript": "document.body.style.zoom = 1.2;", '
        '"css": "body { font-size: 18px; }", "explanation": "Made text larger."}\n'
        "```"
    )
    assert parse_modification(raw) == Modification(
        code="document.body.style.zoom = 1.2;",
        css="body { font-size: 18px; }",
        explanation="Made text larger.",
    )


def test_code_key_and_default_explanation():
    mod = parse_modification('{"code": "alert(1)"}')
    assert mod.code == "alert(1)"
    assert mod.css == ""
    assert mod.explanation == "Modifications applied."


def test_truncated_reply_keeps_finished_fields():
    mod = parse_modification('{"javascript": "hide()", "css": ".ad { display: no')
    assert mod.code == "hide()"
    assert mod.css == ".ad { display: no"


def test_prose_reply_becomes_explanation():
    mod = parse_modification("I can't change that page.")
    assert mod == Modification(explanation="I can't change that page.")
