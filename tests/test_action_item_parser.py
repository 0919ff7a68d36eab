from backend.services.action_item_parser import (
    bullet_lines_rule,
    json_list_rule,
    parse_suggested_items,
    single_item_rule,
    strip_code_fence,
)


def test_json_array_is_taken_as_is():
    assert parse_suggested_items('["Schedule call", "Send pricing"]') == ["Schedule call", "Send pricing"]


def test_json_array_drops_blank_entries():
    assert parse_suggested_items('["Schedule call", "  ", ""]') == ["Schedule call"]


def test_empty_json_array_means_no_items():
    assert parse_suggested_items("[]") == []


def test_fenced_json_with_language_tag():
    raw = '```json\n["Schedule call", "Send pricing"]\n```'
    assert parse_suggested_items(raw) == ["Schedule call", "Send pricing"]


def test_fenced_json_without_language_tag():
    raw = '```\n["Schedule call"]\n```'
    assert parse_suggested_items(raw) == ["Schedule call"]


def test_dash_bullets_fallback():
    assert parse_suggested_items("- Schedule call\n- Send pricing\n") == ["Schedule call", "Send pricing"]


def test_star_bullets_inside_fence():
    raw = "```\n* Schedule call\n*   Send pricing\n\n```"
    assert parse_suggested_items(raw) == ["Schedule call", "Send pricing"]


def test_plain_lines_without_bullets():
    assert parse_suggested_items("Schedule call\nSend pricing") == ["Schedule call", "Send pricing"]


def test_single_sentence_becomes_one_item():
    assert parse_suggested_items("Send the security questionnaire") == ["Send the security questionnaire"]


def test_no_action_items_reply_is_empty():
    assert parse_suggested_items("No action items found.") == []
    assert parse_suggested_items("  NO ACTION ITEMS FOUND.  ") == []


def test_blank_reply_is_empty():
    assert parse_suggested_items("") == []
    assert parse_suggested_items("   \n  ") == []
    assert parse_suggested_items(None) == []


def test_json_that_is_not_a_string_list_falls_through():
    # a JSON object is neither a list nor bullets: kept whole
    assert parse_suggested_items('{"items": 2}') == ['{"items": 2}']


def test_rules_decline_what_they_do_not_handle():
    assert json_list_rule("not json") is None
    assert json_list_rule("[1, 2]") is None
    assert bullet_lines_rule("one line only") is None
    assert single_item_rule("") is None
    assert single_item_rule("No action items found.") is None


def test_strip_code_fence_leaves_plain_text_alone():
    assert strip_code_fence("  hello  ") == "hello"
    assert strip_code_fence("```python\nx = 1\n```") == "x = 1"


def test_deeply_nested_json_does_not_raise():
    raw = "[" * 200000
    assert json_list_rule(raw) is None
    assert parse_suggested_items(raw) == [raw]


def test_json_entries_are_kept_as_written():
    assert parse_suggested_items('[" Schedule call ", "Send pricing"]') == [" Schedule call ", "Send pricing"]
