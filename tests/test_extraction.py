import pytest

from marketing.extraction import ReplyParseError, clean_json, extract_json, parse_ai_response


def test_plain_json():
    assert parse_ai_response('{"a": 1}') == {"a": 1}


def test_fenced_json():
    assert parse_ai_response('```json\n{"pieces": []}\n```') == {"pieces": []}


def test_prose_around_object():
    raw = 'Sure! Here is your content:\n{"headline": "Hi {there}", "body": "x"}\nLet me know.'
    assert parse_ai_response(raw) == {"headline": "Hi {there}", "body": "x"}


def test_bare_array_extracted():
    assert extract_json('Concepts: [{"title": "A"}] done') == '[{"title": "A"}]'


def test_trailing_commas_and_comments_cleaned():
    raw = '{\n  "a": [1, 2,],\n  // note\n  "b": "c",\n}'
    assert parse_ai_response(raw) == {"a": [1, 2], "b": "c"}


def test_clean_json_keeps_urls():
    assert clean_json('{"url": "https://example.com"}') == '{"url": "https://example.com"}'


def test_truncated_reply_recovered():
    raw = '{"pieces": [{"platform": "instagram", "body": "Half a sent'
    assert parse_ai_response(raw) == {"pieces": [{"platform": "instagram", "body": "Half a sent"}]}


def test_unrecoverable_reply_raises():
    with pytest.raises(ReplyParseError, match="First 200 chars"):
        parse_ai_response("I'm sorry, I can't help with that.")
