"""Tests for the field pattern grammar and matcher."""

from __future__ import annotations

import pytest

from cronwhen.scheduler import (
    AnyOf,
    Exact,
    PatternSyntaxError,
    Span,
    Step,
    Wildcard,
    is_match,
    parse_pattern,
)


class TestWildcard:
    @pytest.mark.parametrize("value", range(60))
    def test_matches_any_value(self, value):
        assert is_match(value, "*") is True


class TestExact:
    def test_matches_exact_value(self):
        assert is_match(5, "5") is True

    def test_rejects_non_match(self):
        assert is_match(6, "5") is False

    def test_matches_zero(self):
        assert is_match(0, "0") is True

    def test_equality_over_field(self):
        assert [v for v in range(60) if is_match(v, "17")] == [17]


class TestList:
    def test_matches_value_in_list(self):
        assert is_match(15, "0,15,30,45") is True

    def test_matches_first_and_last(self):
        assert is_match(0, "0,15,30,45") is True
        assert is_match(45, "0,15,30,45") is True

    def test_rejects_value_not_in_list(self):
        assert is_match(10, "0,15,30,45") is False

    def test_items_may_be_ranges_and_steps(self):
        pattern = "1-3,*/20,45"
        matched = [v for v in range(60) if is_match(v, pattern)]
        assert matched == [0, 1, 2, 3, 20, 40, 45]

    def test_list_is_or_of_items(self):
        items = ["2", "10-12", "30-40/5"]
        pattern = ",".join(items)
        for value in range(60):
            expected = any(is_match(value, item) for item in items)
            assert is_match(value, pattern) is expected

    def test_whitespace_around_items_is_ignored(self):
        assert is_match(15, "0, 15, 30") is True


class TestRange:
    def test_matches_inside_and_bounds(self):
        assert is_match(3, "1-5") is True
        assert is_match(1, "1-5") is True
        assert is_match(5, "1-5") is True

    def test_rejects_outside(self):
        assert is_match(0, "1-5") is False
        assert is_match(6, "1-5") is False


class TestStep:
    def test_wildcard_step(self):
        assert is_match(0, "*/5") is True
        assert is_match(15, "*/5") is True
        assert is_match(30, "*/5") is True
        assert is_match(7, "*/5") is False
        assert is_match(4, "*/2") is True

    def test_wildcard_step_is_modulo(self):
        for value in range(60):
            assert is_match(value, "*/7") is (value % 7 == 0)

    def test_range_step(self):
        assert is_match(1, "1-10/2") is True
        assert is_match(5, "1-10/2") is True
        assert is_match(9, "1-10/2") is True
        assert is_match(2, "1-10/2") is False
        assert is_match(0, "1-10/2") is False
        assert is_match(11, "1-10/2") is False

    def test_range_step_counts_from_start(self):
        matched = [v for v in range(24) if is_match(v, "9-17/4")]
        assert matched == [9, 13, 17]

    def test_single_number_base_matches_only_itself(self):
        assert is_match(5, "5/10") is True
        assert is_match(15, "5/10") is False


class TestParsePattern:
    def test_parses_each_form(self):
        assert parse_pattern("*") == Wildcard()
        assert parse_pattern("7") == Exact(7)
        assert parse_pattern("1-5") == Span(1, 5)
        assert parse_pattern("*/15") == Step(15)
        assert parse_pattern("0-30/10") == Step(10, 0, 30)
        assert parse_pattern("1,2") == AnyOf((Exact(1), Exact(2)))

    @pytest.mark.parametrize("text", ["*", "5", "0,15,30,45", "1-5", "*/5", "1-10/2", "5/3"])
    def test_str_renders_grammar(self, text):
        assert str(parse_pattern(text)) == text

    @pytest.mark.parametrize(
        "text",
        ["", "abc", "1-", "-1", "1-2-3", "*/0", "*/x", "1.5", "**", "1,,2", "jan", "5/"],
    )
    def test_rejects_malformed(self, text):
        with pytest.raises(PatternSyntaxError):
            parse_pattern(text)

    def test_syntax_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_pattern("nope")

    def test_compiled_pattern_accepted_by_is_match(self):
        compiled = parse_pattern("1-10/2")
        assert is_match(3, compiled) is True
        assert is_match(4, compiled) is False

    def test_compiled_patterns_are_immutable(self):
        compiled = parse_pattern("1-5")
        with pytest.raises(AttributeError):
            compiled.start = 0  # type: ignore[misc]
