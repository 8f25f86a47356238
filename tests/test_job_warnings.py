"""Tests for backend warning normalization."""

from scout_gateway.job_warnings import FALLBACK_MESSAGE, JobWarnings, extract_warnings


def test_string_warnings_are_deduplicated_in_order():
    result = extract_warnings(["a", "a", "b"])
    assert result.to_dict() == {"messages": ["a", "b"], "codes": []}


def test_reason_used_when_message_missing():
    result = extract_warnings([{"code": "X", "reason": "bad"}])
    assert result.messages == ["bad"]
    assert result.codes == ["X"]


def test_message_precedence():
    warnings = [
        {"message": "m", "reason": "r", "detail": "d", "code": "C1"},
        {"reason": "r", "detail": "d"},
        {"detail": "d"},
        {"code": "ONLY_CODE"},
        {},
    ]
    result = extract_warnings(warnings)
    assert result.messages == ["m", "r", "d", "ONLY_CODE", FALLBACK_MESSAGE]
    assert result.codes == ["C1", "ONLY_CODE"]


def test_codes_deduplicated_and_non_string_codes_ignored():
    warnings = [
        {"code": "LOW_FPS", "message": "one"},
        {"code": "LOW_FPS", "message": "two"},
        {"code": 42, "message": "three"},
    ]
    result = extract_warnings(warnings)
    assert result.codes == ["LOW_FPS"]
    assert result.messages == ["one", "two", "three"]


def test_unknown_items_are_skipped():
    result = extract_warnings([None, 5, ["nested"], "kept"])
    assert result.messages == ["kept"]
    assert result.codes == []


def test_non_list_input_gives_empty_result():
    for value in (None, "warning", {"message": "x"}, 3):
        assert extract_warnings(value) == JobWarnings()


def test_results_are_fresh_per_call():
    first = extract_warnings(["a"])
    first.messages.append("mutated")
    assert extract_warnings(["a"]).messages == ["a"]
