"""Line-by-line interpreter for man page macros.

:class:`ManInterpreter` takes one input line at a time and returns at most
one line of HTML.  It keeps the block structure of the page on a
:class:`ModeStack` (paragraphs, definition lists, bullet lists, nested
``.RS`` regions) and closes open regions whenever a new construct needs
them closed.

Request handlers all have the signature ``handler(request, source)``.
Handlers that need more input (``.TP``, ``.IP``, ``.TS``, ``.de``) read it
from *source*, which is the same :class:`~man2html.parser.LineSource` the
driver iterates over.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Union

from man2html.escapes import (
    alternate_fonts,
    expand_text,
    link_urls,
    set_font,
    strip_tags,
)
from man2html.output_modes import DocumentHeader, OutputMode
from man2html.parser import (
    LineSource,
    MacroRequest,
    is_comment,
    is_request,
    parse_request,
    strip_comment,
)
from man2html.table_handler import TableHandler

logger = logging.getLogger("man2html")

BULLET_MARKERS = frozenset({"o", "\\(bu", "\\[bu]"})

IGNORED_REQUESTS = ("ad", "na", "nh", "hy", "ne", "PD", "UC")

_BLANK_RUN_RE = re.compile(r"(?:\s|&nbsp;)+")


# ---------------------------------------------------------------------------
# Block modes
# ---------------------------------------------------------------------------

class Mode(Enum):
    PARAGRAPH = "paragraph"
    DEFINITION_LIST = "definition_list"
    BULLET_LIST = "bullet_list"


_OPENING = {
    Mode.DEFINITION_LIST: "<dl>",
    Mode.BULLET_LIST: "<ul>",
}

_CLOSING = {
    Mode.DEFINITION_LIST: "</dd></dl>",
    Mode.BULLET_LIST: "</li></ul>",
}


class ModeStack:
    """Stack of block modes, one entry per ``.RS`` nesting level.

    The top entry is the mode of the innermost region.  ``.TP`` and ``.IP``
    change the top entry in place; ``.RS`` pushes a fresh paragraph entry.
    """

    def __init__(self) -> None:
        self._modes: list[Mode] = [Mode.PARAGRAPH]

    @property
    def top(self) -> Mode:
        return self._modes[-1]

    def set_top(self, mode: Mode) -> None:
        self._modes[-1] = mode

    def push(self) -> None:
        self._modes.append(Mode.PARAGRAPH)

    def pop(self) -> Mode:
        """Remove and return the top entry.

        Raises:
            IndexError: If only the base entry is left.  The stack is reset
                to a single paragraph entry before raising.
        """
        if len(self._modes) <= 1:
            self.reset()
            raise IndexError("margin decrease without matching increase")
        return self._modes.pop()

    def unwind(self) -> list[Mode]:
        """Empty the stack down to the base, returning modes innermost first."""
        modes = list(reversed(self._modes))
        self.reset()
        return modes

    def reset(self) -> None:
        self._modes = [Mode.PARAGRAPH]

    def snapshot(self) -> list[Mode]:
        return list(self._modes)

    def __len__(self) -> int:
        return len(self._modes)


# ---------------------------------------------------------------------------
# Fragment registry
# ---------------------------------------------------------------------------

def fragment_id(html: str) -> str:
    """Anchor name for a heading: tags dropped, blank runs become ``_``."""
    text = strip_tags(html).replace('"', "").strip()
    return _BLANK_RUN_RE.sub("_", text) or "section"


class FragmentRegistry:
    """Hands out unique anchor names.

    The first request for a name returns it unchanged; later requests for
    the same name get ``_1``, ``_2``, ... appended.
    """

    def __init__(self) -> None:
        self._issued: dict[str, int] = {}

    def register(self, name: str) -> str:
        if name not in self._issued:
            self._issued[name] = 0
            return name
        while True:
            self._issued[name] += 1
            candidate = f"{name}_{self._issued[name]}"
            if candidate not in self._issued:
                self._issued[candidate] = 0
                return candidate

    def __contains__(self, name: object) -> bool:
        return name in self._issued

    def __len__(self) -> int:
        return len(self._issued)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

@dataclass
class Diagnostic:
    """A recoverable problem found in the input."""

    source: str
    lineno: int
    message: str

    def __str__(self) -> str:
        return f"{self.source}:{self.lineno}: {self.message}"


Handler = Callable[[MacroRequest, LineSource], Optional[str]]


# ---------------------------------------------------------------------------
# ManInterpreter
# ---------------------------------------------------------------------------

class ManInterpreter:
    """Convert man page lines to HTML, one line at a time.

    Usage::

        interpreter = ManInterpreter("raw")
        source = LineSource.from_text(".SH NAME\\nls \\\\- list files\\n")
        html = "\\n".join(interpreter.run(source))

    An interpreter holds the state of exactly one document.
    """

    def __init__(self, output: Union[OutputMode, str] = "html") -> None:
        self.output: OutputMode = output if isinstance(output, OutputMode) else OutputMode(output)
        self.modes = ModeStack()
        self.fragments = FragmentRegistry()
        self.tables = TableHandler()
        self.header: Optional[DocumentHeader] = None
        self.trailer = ""
        self.preformatted = False
        self.diagnostics: list[Diagnostic] = []
        self._handlers = self._build_dispatch_table()

    def _build_dispatch_table(self) -> dict[str, Handler]:
        table: dict[str, Handler] = {
            "TH": self._macro_title,
            "SH": self._macro_section,
            "SS": self._macro_subsection,
            "PP": self._macro_paragraph,
            "P": self._macro_paragraph,
            "LP": self._macro_paragraph,
            "IP": self._macro_list_item,
            "TP": self._macro_term,
            "RS": self._macro_margin_increase,
            "RE": self._macro_margin_decrease,
            "B": self._macro_font,
            "I": self._macro_font,
            "br": self._macro_break,
            "sp": self._macro_break,
            "nf": self._macro_preformatted_start,
            "EX": self._macro_preformatted_start,
            "fi": self._macro_preformatted_end,
            "EE": self._macro_preformatted_end,
            "de": self._macro_definition,
            "TS": self._macro_table,
            '\\"': self._macro_ignore,
        }
        for name in ("BI", "IB", "BR", "RB", "IR", "RI"):
            table[name] = self._macro_alternating_fonts
        for name in IGNORED_REQUESTS:
            table[name] = self._macro_ignore
        return table

    # ======================================================================
    # Driver
    # ======================================================================

    def run(self, source: LineSource) -> Iterator[str]:
        """Yield the HTML lines for every line of *source*, then the trailer."""
        for line in source:
            html = self.expand_line(line, source)
            if html is not None:
                yield html
        closing = self.finish()
        if closing:
            yield closing

    def expand_line(self, line: str, source: LineSource) -> Optional[str]:
        """Convert one input line; ``None`` means no output for it."""
        if is_request(line):
            request = parse_request(line)
            if not request.name:
                return None
            return self.dispatch(request, source)
        return self._expand_text_line(line)

    def dispatch(self, request: MacroRequest, source: LineSource) -> Optional[str]:
        handler = self._handlers.get(request.name)
        if handler is None:
            self.warn(source, f"unknown request '{request.control}{request.name}' ignored")
            return None
        return handler(request, source)

    def finish(self) -> str:
        """Close everything still open and return it with the trailer."""
        parts: list[str] = []
        if self.preformatted:
            parts.append("</pre>")
            self.preformatted = False
        for mode in self.modes.unwind():
            parts.append(_CLOSING.get(mode, ""))
        parts.append(self.trailer)
        return "".join(parts)

    def warn(self, source: LineSource, message: str) -> None:
        diagnostic = Diagnostic(source.name, source.lineno, message)
        self.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)

    # ======================================================================
    # Text lines
    # ======================================================================

    def _expand_text_line(self, line: str) -> Optional[str]:
        if is_comment(line):
            return None
        line = strip_comment(line)
        if not line.strip():
            if self.preformatted:
                return ""
            return self._paragraph_break()
        return link_urls(expand_text(line))

    def _expand_following(self, source: LineSource) -> str:
        """Read the next line and expand it fully; blank or EOF gives ``""``."""
        line = source.next_line()
        if line is None or not line.strip():
            return ""
        return self.expand_line(line, source) or ""

    # ======================================================================
    # Block structure
    # ======================================================================

    def _close_region(self) -> str:
        closing = _CLOSING.get(self.modes.top, "")
        self.modes.set_top(Mode.PARAGRAPH)
        return closing

    def _enter_list(self, mode: Mode, item_close: str) -> str:
        """Markup needed before a new item of a *mode* list."""
        if self.modes.top is mode:
            return item_close
        prefix = self._close_region() + _OPENING[mode]
        self.modes.set_top(mode)
        return prefix

    def _paragraph_break(self) -> str:
        return self._close_region() + "<p>"

    def _macro_paragraph(self, request: MacroRequest, source: LineSource) -> str:
        return self._paragraph_break()

    def _macro_list_item(self, request: MacroRequest, source: LineSource) -> str:
        if not request.args or request.args[0] not in BULLET_MARKERS:
            return self._paragraph_break()
        prefix = self._enter_list(Mode.BULLET_LIST, "</li>")
        return f"{prefix}<li>{self._expand_following(source)}"

    def _macro_term(self, request: MacroRequest, source: LineSource) -> str:
        prefix = self._enter_list(Mode.DEFINITION_LIST, "</dd>")
        return f"{prefix}<dt>{self._expand_following(source)}</dt><dd>"

    def _macro_margin_increase(self, request: MacroRequest, source: LineSource) -> None:
        self.modes.push()

    def _macro_margin_decrease(self, request: MacroRequest, source: LineSource) -> Optional[str]:
        base = self.modes.top
        try:
            popped = self.modes.pop()
        except IndexError:
            self.warn(source, f"'{request.control}RE' without matching '.RS'; indentation reset")
            return _CLOSING.get(base)
        return _CLOSING.get(popped)

    # ======================================================================
    # Headings and title
    # ======================================================================

    def _heading(self, request: MacroRequest, source: LineSource, level: int) -> str:
        text = request.text
        if not request.args:
            text = source.next_line() or ""
        prefix = self._close_region()
        html = expand_text(text)
        anchor = self.fragments.register(fragment_id(html))
        return f'{prefix}<h{level} id="{anchor}"><a href="#{anchor}">{html}</a></h{level}>'

    def _macro_section(self, request: MacroRequest, source: LineSource) -> str:
        return self._heading(request, source, 2)

    def _macro_subsection(self, request: MacroRequest, source: LineSource) -> str:
        return self._heading(request, source, 3)

    def _macro_title(self, request: MacroRequest, source: LineSource) -> Optional[str]:
        self.header = DocumentHeader.from_args(request.args)
        self.trailer = self.output.trailer(self.header)
        return self.output.preamble(self.header) or None

    # ======================================================================
    # Fonts and breaks
    # ======================================================================

    def _macro_font(self, request: MacroRequest, source: LineSource) -> str:
        text = request.text
        if not request.args:
            text = source.next_line() or ""
        return set_font(expand_text(text), request.name)

    def _macro_alternating_fonts(self, request: MacroRequest, source: LineSource) -> Optional[str]:
        fonts = (request.name[0], request.name[1])
        return alternate_fonts(request.args, fonts) or None

    def _macro_break(self, request: MacroRequest, source: LineSource) -> str:
        return "<br>"

    def _macro_preformatted_start(self, request: MacroRequest, source: LineSource) -> Optional[str]:
        if self.preformatted:
            return None
        self.preformatted = True
        return "<pre>"

    def _macro_preformatted_end(self, request: MacroRequest, source: LineSource) -> Optional[str]:
        if not self.preformatted:
            return None
        self.preformatted = False
        return "</pre>"

    # ======================================================================
    # Blocks that consume further lines
    # ======================================================================

    def _macro_table(self, request: MacroRequest, source: LineSource) -> str:
        return self.tables.render(source)

    def _macro_definition(self, request: MacroRequest, source: LineSource) -> None:
        # Body runs to a line starting with a doubled control character.
        while True:
            line = source.next_line()
            if line is None or line[:2] in ("..", "''"):
                return None

    def _macro_ignore(self, request: MacroRequest, source: LineSource) -> None:
        return None
