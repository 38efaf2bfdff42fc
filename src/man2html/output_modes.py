"""Output modes and the document preamble built from the ``.TH`` request.

Three modes are supported:

``html``
    A complete HTML document: the ``.TH`` request opens it and the end of
    input closes it.
``jekyll``
    YAML front matter for a Jekyll page, no trailer.
``raw``
    Just the converted body.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable, Optional

from man2html.escapes import expand_special, strip_tags


class ConfigurationError(ValueError):
    """Raised for an unusable converter configuration."""


# ---------------------------------------------------------------------------
# Document header
# ---------------------------------------------------------------------------

@dataclass
class DocumentHeader:
    """Arguments of ``.TH title section [date [package [section_text]]]``."""

    title: str = ""
    section: str = ""
    date: str = ""
    package: str = ""
    section_text: str = ""

    @classmethod
    def from_args(cls, args: list[str]) -> DocumentHeader:
        values = [strip_tags(expand_special(a)) for a in args[:5]]
        values += [""] * (5 - len(values))
        return cls(*values)

    @property
    def page_name(self) -> str:
        """``ls(1)`` style name of the page."""
        if self.section:
            return f"{self.title}({self.section})"
        return self.title


# ---------------------------------------------------------------------------
# Preamble builders
# ---------------------------------------------------------------------------

_YAML_PLAIN_RE = re.compile(r"^[\w(/.][\w ()/.,+-]*$")


def _yaml_scalar(value: str) -> str:
    """Quote *value* unless it is safe as a plain YAML scalar."""
    if _YAML_PLAIN_RE.match(value) and not value.endswith(" "):
        return value
    return json.dumps(value, ensure_ascii=False)


def _html_preamble(header: DocumentHeader, mode: OutputMode) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{header.page_name} manual page</title>\n"
        "</head>\n"
        "<body>"
    )


def _jekyll_preamble(header: DocumentHeader, mode: OutputMode) -> str:
    fields = [
        ("permalink", mode.permalink or ""),
        ("layout", mode.layout or ""),
        ("title", header.page_name),
        ("package", header.package),
        ("date", header.date),
        ("section_text", header.section_text),
    ]
    lines = ["---"]
    for key, value in fields:
        if value:
            lines.append(f"{key}: {_yaml_scalar(value)}")
    lines.append("---")
    return "\n".join(lines)


def _raw_preamble(header: DocumentHeader, mode: OutputMode) -> str:
    return ""


_MODE_BUILDERS: dict[str, tuple[Callable[[DocumentHeader, OutputMode], str], str]] = {
    "html": (_html_preamble, "</body></html>"),
    "jekyll": (_jekyll_preamble, ""),
    "raw": (_raw_preamble, ""),
}


# ---------------------------------------------------------------------------
# OutputMode
# ---------------------------------------------------------------------------

class OutputMode:
    """Selects what surrounds the converted body.

    Usage::

        mode = OutputMode("jekyll", permalink="/man/ls.html")
        header = DocumentHeader.from_args(["ls", "1"])
        mode.preamble(header)
    """

    MODES = list(_MODE_BUILDERS.keys())

    def __init__(
        self,
        name: str = "html",
        *,
        permalink: Optional[str] = None,
        layout: Optional[str] = "manpage",
    ) -> None:
        if name not in _MODE_BUILDERS:
            raise ConfigurationError(
                f"Unknown output mode {name!r}. Choose from: {', '.join(_MODE_BUILDERS)}"
            )
        self.name = name
        self.permalink = permalink
        self.layout = layout

    def preamble(self, header: DocumentHeader) -> str:
        builder, _ = _MODE_BUILDERS[self.name]
        return builder(header, self)

    def trailer(self, header: DocumentHeader) -> str:
        _, trailer = _MODE_BUILDERS[self.name]
        return trailer
