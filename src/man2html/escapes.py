"""Inline escape expansion for man page text.

Text goes through :func:`expand_special` first, which turns troff escapes
into HTML entities and escapes ``&``, ``<`` and ``>``.  Font escapes are
expanded afterwards by :func:`expand_fonts`, so the tags it inserts are
never escaped again.  :func:`link_urls` runs last and only on literal text
lines.
"""

from __future__ import annotations

import re
from typing import Iterable


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

SPECIAL_CHARS: dict[str, str] = {
    "em": "&mdash;",
    "en": "&ndash;",
    "hy": "-",
    "mi": "&minus;",
    "lq": "&ldquo;",
    "rq": "&rdquo;",
    "oq": "&lsquo;",
    "cq": "&rsquo;",
    "aq": "&#39;",
    "dq": "&quot;",
    "bu": "&bull;",
    "de": "&deg;",
    "co": "&copy;",
    "rg": "&reg;",
    "tm": "&trade;",
    "sc": "&sect;",
    "ps": "&para;",
    "dg": "&dagger;",
    "mu": "&times;",
    "di": "&divide;",
    "+-": "&plusmn;",
    "->": "&rarr;",
    "<-": "&larr;",
    "<>": "&harr;",
    "ua": "&uarr;",
    "da": "&darr;",
    "<=": "&le;",
    ">=": "&ge;",
    "!=": "&ne;",
    "==": "&equiv;",
    "12": "&frac12;",
    "14": "&frac14;",
    "34": "&frac34;",
    "ti": "~",
    "ha": "^",
    "rs": "&#92;",
    "ba": "|",
}

NAMED_STRINGS: dict[str, str] = {
    "R": "&reg;",
    "Tm": "&trade;",
    "lq": "&ldquo;",
    "rq": "&rdquo;",
}

# Font name -> tags opened for it.  Fonts not listed here are roman.
FONT_TAGS: dict[str, tuple[str, ...]] = {
    "B": ("b",),
    "3": ("b",),
    "I": ("em",),
    "2": ("em",),
    "BI": ("b", "em"),
    "4": ("b", "em"),
    "CW": ("code",),
    "CR": ("code",),
    "C": ("code",),
}

# This URL shows up in page sources as an XML namespace, never as a link.
UNLINKED_URL = "http://www.w3.org/1999/xhtml"

_SIMPLE_ESCAPES = {
    "&": "",
    "|": "",
    "^": "",
    "%": "",
    ":": "",
    "c": "",
    "e": "&#92;",
    "\\": "&#92;",
    " ": "&nbsp;",
    "~": "&nbsp;",
    "\t": "&nbsp;",
}

_SIMPLE_RE = re.compile(r"\\([&|^%:ce\\ ~\t])")
_HYPHEN_RE = re.compile(r"\\-")
# Entities the engine writes itself; any other "&name;" is literal text.
_ENTITY_NAMES = {"amp", "lt", "gt", "quot", "nbsp"} | {
    name
    for value in (*SPECIAL_CHARS.values(), *NAMED_STRINGS.values())
    for name in re.findall(r"&(\w+);", value)
}
_AMPERSAND_RE = re.compile(
    r"&(?!#\d+;|#[xX][0-9A-Fa-f]+;|(?:%s);)" % "|".join(sorted(_ENTITY_NAMES))
)
_SPECIAL_RE = re.compile(r"\\(?:\((..)|\[([^\]\s]+)\])")
_STRING_RE = re.compile(r"\\\*(?:\((..)|\[([^\]\s]+)\]|([^(\[]))")
_FONT_RE = re.compile(r"\\f(?:\((..)|\[([^\]]*)\]|(.))")
_TAG_RE = re.compile(r"<[^>]*>")
_URL_RE = re.compile(
    r"https?://[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*(?::\d+)?"
    r"(?:/(?:[A-Za-z0-9_~%+./-]*[A-Za-z0-9_~%+/-])?)?"
)


# ---------------------------------------------------------------------------
# Special characters and named strings
# ---------------------------------------------------------------------------

def _lookup(table: dict[str, str], match: re.Match) -> str:
    name = next(g for g in match.groups() if g is not None)
    return table.get(name, match.group(0))


def expand_special(text: str) -> str:
    """Expand special characters and named strings, escape HTML.

    Unknown ``\\(xx`` codes are left as written.  Running this on its own
    output changes nothing.
    """
    text = _SIMPLE_RE.sub(lambda m: _SIMPLE_ESCAPES[m.group(1)], text)
    text = _HYPHEN_RE.sub(r"\\(hy", text)
    text = _AMPERSAND_RE.sub("&amp;", text)
    text = _SPECIAL_RE.sub(lambda m: _lookup(SPECIAL_CHARS, m), text)
    text = _STRING_RE.sub(lambda m: _lookup(NAMED_STRINGS, m), text)
    return text.replace("<", "&lt;").replace(">", "&gt;")


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

def _open_tags(tags: tuple[str, ...]) -> str:
    return "".join(f"<{t}>" for t in tags)


def _close_tags(tags: tuple[str, ...]) -> str:
    return "".join(f"</{t}>" for t in reversed(tags))


def expand_fonts(text: str) -> str:
    """Replace ``\\fB``/``\\fI``/``\\fR``/``\\fP`` escapes with tags.

    A font span runs until the next font escape.  A span still open at the
    end of *text* is closed there, so the result is always balanced.
    """
    parts: list[str] = []
    current: tuple[str, ...] = ()
    pos = 0
    for match in _FONT_RE.finditer(text):
        parts.append(text[pos:match.start()])
        name = next(g for g in match.groups() if g is not None)
        tags = FONT_TAGS.get(name, ())
        if tags != current:
            parts.append(_close_tags(current))
            parts.append(_open_tags(tags))
            current = tags
        pos = match.end()
    parts.append(text[pos:])
    parts.append(_close_tags(current))
    return "".join(parts)


def expand_text(text: str) -> str:
    """Full inline expansion minus URL linking."""
    return expand_fonts(expand_special(text))


def set_font(html: str, font: str) -> str:
    """Wrap already expanded *html* in the tags for *font*."""
    tags = FONT_TAGS.get(font, ())
    return f"{_open_tags(tags)}{html}{_close_tags(tags)}"


def alternate_fonts(words: Iterable[str], fonts: tuple[str, str]) -> str:
    """Render *words* in *fonts* round-robin, joined without blanks.

    ``alternate_fonts(["ls", "(1)"], ("B", "R"))`` gives ``<b>ls</b>(1)``.
    """
    return "".join(
        set_font(expand_text(word), fonts[idx % 2])
        for idx, word in enumerate(words)
    )


# ---------------------------------------------------------------------------
# URLs and anchors
# ---------------------------------------------------------------------------

def _link(match: re.Match) -> str:
    url = match.group(0)
    if url.startswith(UNLINKED_URL):
        return url
    return f'<a href="{url}">{url}</a>'


def link_urls(html: str) -> str:
    """Turn bare http(s) URLs into links.

    The pattern is deliberately narrow: host, optional port and a simple
    path.  A trailing period is treated as punctuation.
    """
    return _URL_RE.sub(_link, html)


def strip_tags(html: str) -> str:
    return _TAG_RE.sub("", html)
