"""Line source and request tokenizer for man page input.

Every input line is either a *request* (it starts with a control
character, ``.`` or ``'``) or literal text.  This module reads lines and
splits request lines into a :class:`MacroRequest`; it knows nothing about
what the requests mean.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional


CONTROL_CHARS = ".'"
COMMENT = '\\"'

# Stand-ins for escaped blanks while a request line is being split.
_PROTECTED = {" ": "\x00", "\t": "\x01"}
_RESTORED = {v: "\\" + k for k, v in _PROTECTED.items()}

_ESCAPED_BLANK_RE = re.compile(r"\\([ \t])")
_COMMENT_RE = re.compile(r'(?<!\\)\\"')


# ---------------------------------------------------------------------------
# Line source
# ---------------------------------------------------------------------------

class LineSource:
    """Forward-only reader over input lines that remembers its position.

    Handlers that need more than one line (tables, list items, macro
    definitions) pull from the same source the driver iterates over::

        source = LineSource(open("ls.1"), name="ls.1")
        for line in source:
            ...
            extra = source.next_line()
    """

    def __init__(self, lines: Iterable[str], name: str = "<input>") -> None:
        self.name = name
        self.lineno = 0
        self._lines = iter(lines)

    @classmethod
    def from_text(cls, text: str, name: str = "<string>") -> LineSource:
        return cls(text.splitlines(), name)

    def next_line(self) -> Optional[str]:
        """Return the next line without its line ending, or ``None`` at EOF."""
        try:
            line = next(self._lines)
        except StopIteration:
            return None
        self.lineno += 1
        return line.rstrip("\r\n")

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = self.next_line()
        if line is None:
            raise StopIteration
        return line


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@dataclass
class MacroRequest:
    """A parsed request line such as ``.SH "SEE ALSO"``."""

    name: str
    args: list[str] = field(default_factory=list)
    control: str = "."

    @property
    def text(self) -> str:
        """Arguments joined by single spaces."""
        return " ".join(self.args)

    @property
    def is_comment(self) -> bool:
        return self.name == COMMENT


def is_request(line: str) -> bool:
    return bool(line) and line[0] in CONTROL_CHARS


def is_comment(line: str) -> bool:
    """True for a text line that holds nothing but a ``\\"`` comment."""
    return line.lstrip().startswith(COMMENT)


def strip_comment(text: str) -> str:
    """Drop a trailing ``\\"`` comment and the blanks before it."""
    match = _COMMENT_RE.search(text)
    if match is None:
        return text
    return text[:match.start()].rstrip()


def split_words(text: str) -> list[str]:
    """Split request arguments the way troff does.

    Blanks separate words.  A word that starts with ``"`` runs to the next
    ``"``; inside it a doubled ``""`` stands for one quote character.  An
    escaped blank (``\\`` followed by a space or tab) never splits a word
    and is handed back as written.
    """
    text = _ESCAPED_BLANK_RE.sub(lambda m: _PROTECTED[m.group(1)], text)

    words: list[str] = []
    current: list[str] = []
    in_word = False
    in_quotes = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if text[i + 1:i + 2] == '"':
                    current.append('"')
                    i += 2
                    continue
                words.append("".join(current))
                current = []
                in_quotes = in_word = False
            else:
                current.append(ch)
        elif ch in " \t":
            if in_word:
                words.append("".join(current))
                current = []
                in_word = False
        elif ch == '"' and not in_word:
            in_quotes = in_word = True
        else:
            current.append(ch)
            in_word = True
        i += 1

    if in_word:
        words.append("".join(current))

    return [_restore_blanks(w) for w in words]


def _restore_blanks(word: str) -> str:
    for marker, escape in _RESTORED.items():
        word = word.replace(marker, escape)
    return word


def parse_request(line: str) -> MacroRequest:
    """Tokenize a request line.

    A line holding only the control character yields a request with an
    empty name.  Comment lines (``.\\"``) yield a request named ``\\"``
    whose single argument is the comment text.
    """
    control = line[:1]
    body = line[1:].lstrip(" \t")
    if body.startswith(COMMENT):
        return MacroRequest(name=COMMENT, args=[body[2:].strip()], control=control)

    words = split_words(strip_comment(body))
    if not words:
        return MacroRequest(name="", control=control)
    return MacroRequest(name=words[0], args=words[1:], control=control)
