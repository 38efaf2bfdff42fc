"""Tests for inline escape expansion and URL linking."""

from __future__ import annotations

import pytest

from man2html.escapes import (
    NAMED_STRINGS,
    SPECIAL_CHARS,
    UNLINKED_URL,
    alternate_fonts,
    expand_fonts,
    expand_special,
    expand_text,
    link_urls,
    set_font,
    strip_tags,
)


# ---------------------------------------------------------------------------
# Special characters
# ---------------------------------------------------------------------------

class TestSpecialCharacters:
    def test_dash_escapes(self) -> None:
        assert expand_special("a \\(em b \\(en c") == "a &mdash; b &ndash; c"

    def test_bracket_form(self) -> None:
        assert expand_special("\\[bu] item") == "&bull; item"

    def test_comparison_operators_are_not_escaped_twice(self) -> None:
        assert expand_special("x \\(<= y \\(>= z") == "x &le; y &ge; z"

    def test_no_break_hyphen(self) -> None:
        assert expand_special("\\-\\-help") == "--help"

    def test_zero_width_removed(self) -> None:
        assert expand_special("\\&.SH at line start") == ".SH at line start"

    def test_backslash(self) -> None:
        assert expand_special("C:\\e or \\\\") == "C:&#92; or &#92;"

    def test_escaped_backslash_does_not_start_escape(self) -> None:
        assert expand_special("\\\\(em") == "&#92;(em"

    def test_ampersand(self) -> None:
        assert expand_special("AT&T") == "AT&amp;T"

    def test_entity_lookalike_is_escaped(self) -> None:
        assert expand_special("AT&T; rocks") == "AT&amp;T; rocks"

    def test_known_entities_left_alone(self) -> None:
        text = "&amp; &lt; &mdash; &#92; &#x41;"
        assert expand_special(text) == text

    @pytest.mark.parametrize("code", sorted(SPECIAL_CHARS))
    def test_special_output_is_stable(self, code: str) -> None:
        html = expand_special(f"\\[{code}]")
        assert expand_special(html) == html

    def test_angle_brackets(self) -> None:
        assert expand_special("<file>") == "&lt;file&gt;"

    def test_unknown_code_left_alone(self) -> None:
        assert expand_special("\\(zz") == "\\(zz"

    def test_protected_space(self) -> None:
        assert expand_special("a\\ b") == "a&nbsp;b"

    def test_table_size(self) -> None:
        assert len(SPECIAL_CHARS) >= 30


class TestNamedStrings:
    @pytest.mark.parametrize("escape, html", [
        ("\\*R", "&reg;"),
        ("\\*(Tm", "&trade;"),
        ("\\*(lq", "&ldquo;"),
        ("\\*(rq", "&rdquo;"),
        ("\\*[Tm]", "&trade;"),
    ])
    def test_named_strings(self, escape: str, html: str) -> None:
        assert expand_special(escape) == html

    def test_unknown_string_left_alone(self) -> None:
        assert expand_special("\\*(XX") == "\\*(XX"


class TestIdempotence:
    @pytest.mark.parametrize("code", sorted(SPECIAL_CHARS))
    def test_special_char_output_is_stable(self, code: str) -> None:
        once = expand_special(f"\\({code}")
        assert expand_special(once) == once

    @pytest.mark.parametrize("name", sorted(NAMED_STRINGS))
    def test_named_string_output_is_stable(self, name: str) -> None:
        once = expand_special(f"\\*[{name}]")
        assert expand_special(once) == once

    def test_mixed_text_is_stable(self) -> None:
        once = expand_special("a & b < c \\(em d\\e")
        assert expand_special(once) == once


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

class TestFonts:
    def test_bold_then_italic(self) -> None:
        html = expand_text("\\fBbold\\fR\\fIitalic\\fR")
        assert html == "<b>bold</b><em>italic</em>"

    def test_direct_switch(self) -> None:
        assert expand_fonts("\\fBa\\fIb\\fP") == "<b>a</b><em>b</em>"

    def test_escaped_content_inside_span(self) -> None:
        html = expand_text("\\fB<a&b>\\fR")
        assert html == "<b>&lt;a&amp;b&gt;</b>"
        assert "\\f" not in html

    def test_unclosed_span_closed_at_end(self) -> None:
        assert expand_fonts("\\fBdangling") == "<b>dangling</b>"

    def test_two_letter_font(self) -> None:
        assert expand_fonts("\\f(CWcode\\fR") == "<code>code</code>"

    def test_bracket_font(self) -> None:
        assert expand_fonts("\\f[I]it\\f[]") == "<em>it</em>"

    def test_bold_italic(self) -> None:
        assert expand_fonts("\\f(BIx\\fR") == "<b><em>x</em></b>"

    def test_roman_only(self) -> None:
        assert expand_fonts("\\fRplain") == "plain"

    def test_set_font(self) -> None:
        assert set_font("x", "B") == "<b>x</b>"
        assert set_font("x", "R") == "x"


class TestAlternatingFonts:
    def test_bold_roman(self) -> None:
        assert alternate_fonts(["ls", "(1)"], ("B", "R")) == "<b>ls</b>(1)"

    def test_round_robin(self) -> None:
        html = alternate_fonts(["a", "b", "c", "d"], ("B", "I"))
        assert html == "<b>a</b><em>b</em><b>c</b><em>d</em>"

    def test_arguments_are_expanded(self) -> None:
        assert alternate_fonts(["\\-v", "<n>"], ("B", "I")) == "<b>-v</b><em>&lt;n&gt;</em>"

    def test_no_words(self) -> None:
        assert alternate_fonts([], ("I", "R")) == ""


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

class TestLinkUrls:
    def test_simple_url(self) -> None:
        html = link_urls("see http://example.com/page.html now")
        assert html == 'see <a href="http://example.com/page.html">http://example.com/page.html</a> now'

    def test_https_with_trailing_slash(self) -> None:
        html = link_urls("https://example.org/docs/")
        assert html == '<a href="https://example.org/docs/">https://example.org/docs/</a>'

    def test_pdf(self) -> None:
        assert 'href="http://example.com/a/b.pdf"' in link_urls("http://example.com/a/b.pdf")

    def test_trailing_period_not_included(self) -> None:
        html = link_urls("Visit http://example.com.")
        assert html == 'Visit <a href="http://example.com">http://example.com</a>.'

    def test_exempt_url(self) -> None:
        text = f"xmlns {UNLINKED_URL} here"
        assert link_urls(text) == text

    def test_no_url(self) -> None:
        assert link_urls("plain text") == "plain text"


def test_strip_tags() -> None:
    assert strip_tags("<b>bold</b> <em>it</em>") == "bold it"
