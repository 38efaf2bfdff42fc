"""Tests for the line source and request tokenizer."""

from __future__ import annotations

import pytest

from man2html.parser import (
    LineSource,
    MacroRequest,
    is_comment,
    is_request,
    parse_request,
    split_words,
    strip_comment,
)


# ---------------------------------------------------------------------------
# Line source
# ---------------------------------------------------------------------------

class TestLineSource:
    def test_iterates_lines_without_endings(self) -> None:
        source = LineSource(["one\n", "two\r\n", "three"])
        assert list(source) == ["one", "two", "three"]

    def test_counts_lines(self) -> None:
        source = LineSource.from_text("a\nb\nc")
        assert source.lineno == 0
        source.next_line()
        source.next_line()
        assert source.lineno == 2

    def test_next_line_at_eof(self) -> None:
        source = LineSource([])
        assert source.next_line() is None
        assert source.lineno == 0

    def test_handler_reads_share_position(self) -> None:
        source = LineSource.from_text("first\nsecond\nthird")
        seen = []
        for line in source:
            seen.append(line)
            if line == "first":
                assert source.next_line() == "second"
        assert seen == ["first", "third"]
        assert source.lineno == 3

    def test_name(self) -> None:
        assert LineSource([], name="ls.1").name == "ls.1"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class TestClassification:
    @pytest.mark.parametrize("line", [".SH NAME", "'br", ".", ".\\\" comment"])
    def test_requests(self, line: str) -> None:
        assert is_request(line)

    @pytest.mark.parametrize("line", ["", "text", " .SH", "\\fBbold\\fR"])
    def test_text(self, line: str) -> None:
        assert not is_request(line)

    def test_comment_text_line(self) -> None:
        assert is_comment('\\" just a comment')
        assert not is_comment("some text")

    def test_strip_trailing_comment(self) -> None:
        assert strip_comment('some text   \\" note') == "some text"
        assert strip_comment("no comment") == "no comment"


# ---------------------------------------------------------------------------
# Word splitting
# ---------------------------------------------------------------------------

class TestSplitWords:
    def test_blank_separated(self) -> None:
        assert split_words("one  two\tthree") == ["one", "two", "three"]

    def test_quoted_word(self) -> None:
        assert split_words('"SEE ALSO" next') == ["SEE ALSO", "next"]

    def test_doubled_quote_inside_quotes(self) -> None:
        assert split_words('"say ""hi"""') == ['say "hi"']

    def test_empty_quoted_word(self) -> None:
        assert split_words('a "" b') == ["a", "", "b"]

    def test_unterminated_quote_runs_to_end(self) -> None:
        assert split_words('"open ended') == ["open ended"]

    def test_escaped_blank_does_not_split(self) -> None:
        assert split_words("foo\\ bar baz") == ["foo\\ bar", "baz"]

    def test_quote_inside_word_is_literal(self) -> None:
        assert split_words('a"b c') == ['a"b', "c"]

    def test_empty(self) -> None:
        assert split_words("   ") == []


# ---------------------------------------------------------------------------
# Request parsing
# ---------------------------------------------------------------------------

class TestParseRequest:
    def test_name_and_args(self) -> None:
        req = parse_request('.TH prog 1 "2024-01-01" mypackage "My Package"')
        assert req.name == "TH"
        assert req.args == ["prog", "1", "2024-01-01", "mypackage", "My Package"]

    def test_blanks_after_control_char(self) -> None:
        req = parse_request(".   SH NAME")
        assert req.name == "SH"
        assert req.args == ["NAME"]

    def test_apostrophe_control(self) -> None:
        req = parse_request("'br")
        assert req.name == "br"
        assert req.control == "'"

    def test_lone_control_char(self) -> None:
        assert parse_request(".").name == ""

    def test_comment(self) -> None:
        req = parse_request('.\\" written by hand')
        assert req.is_comment
        assert req.args == ["written by hand"]

    def test_trailing_comment_dropped(self) -> None:
        req = parse_request('.B bold \\" not an argument')
        assert req.args == ["bold"]

    def test_text_property(self) -> None:
        req = MacroRequest(name="SH", args=["SEE", "ALSO"])
        assert req.text == "SEE ALSO"
