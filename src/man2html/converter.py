"""High-level man-page-to-HTML conversion orchestrator.

Wraps :class:`~man2html.interpreter.ManInterpreter` in a public API for
converting man page text, streams or files.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Iterable, Iterator, Optional

from man2html.interpreter import Diagnostic, ManInterpreter
from man2html.output_modes import OutputMode
from man2html.parser import LineSource


class Converter:
    """Convert man pages to HTML.

    Usage::

        converter = Converter(mode="html")
        converter.convert_file("ls.1", "ls.1.html")

        # or from string
        html = converter.convert_text(".SH NAME\\nls")

    ``diagnostics`` holds the warnings of the most recent conversion.
    """

    OUTPUT_MODES = OutputMode.MODES

    def __init__(
        self,
        mode: str = "html",
        *,
        permalink: Optional[str] = None,
        layout: Optional[str] = "manpage",
    ) -> None:
        self.output_mode = OutputMode(mode, permalink=permalink, layout=layout)
        self.diagnostics: list[Diagnostic] = []

    def convert_lines(
        self, lines: Iterable[str], source_name: str = "<input>"
    ) -> Iterator[str]:
        """Yield HTML output lines for the man page *lines*."""
        interpreter = ManInterpreter(self.output_mode)
        self.diagnostics = interpreter.diagnostics
        yield from interpreter.run(LineSource(lines, source_name))

    def convert_text(self, man_text: str, source_name: str = "<string>") -> str:
        """Convert man page text to an HTML string.

        Args:
            man_text: troff source using the man macros.
            source_name: Name used in warnings.

        Returns:
            The HTML, one output line per line, newline terminated.
        """
        lines = list(self.convert_lines(man_text.splitlines(), source_name))
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def convert_stream(
        self,
        infile: IO[str],
        outfile: IO[str],
        source_name: Optional[str] = None,
    ) -> None:
        """Convert *infile* line by line, writing HTML to *outfile*."""
        name = source_name or getattr(infile, "name", "<stream>")
        for html in self.convert_lines(infile, name):
            outfile.write(html)
            outfile.write("\n")

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
    ) -> None:
        """Read a man page file and write the HTML output.

        Args:
            input_path: Path to the troff source, e.g. ``ls.1``.
            output_path: Path for the HTML file.
            encoding: Text encoding of the source file.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with input_path.open(encoding=encoding) as infile, \
                output_path.open("w", encoding="utf-8") as outfile:
            self.convert_stream(infile, outfile, source_name=str(input_path))
