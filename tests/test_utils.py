"""Tests for shared utility functions."""

from calli.utils import is_blank, pad_time


class TestPadTime:
    def test_pads_single_digit_components(self):
        assert pad_time("9:5") == "09:05"

    def test_pads_hour_only(self):
        assert pad_time("9:30") == "09:30"

    def test_padded_time_unchanged(self):
        assert pad_time("14:05") == "14:05"

    def test_strips_whitespace(self):
        assert pad_time(" 7:0 ") == "07:00"

    def test_pads_seconds_component(self):
        assert pad_time("9:5:1") == "09:05:01"


class TestIsBlank:
    def test_none_is_blank(self):
        assert is_blank(None)

    def test_empty_string_is_blank(self):
        assert is_blank("")

    def test_whitespace_is_blank(self):
        assert is_blank("   ")

    def test_text_is_not_blank(self):
        assert not is_blank("Jane")

    def test_zero_is_not_blank(self):
        assert not is_blank(0)
