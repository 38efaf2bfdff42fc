"""Command-line interface for man2html.

Usage::

    man2html ls.1                        # writes ls.1.html
    man2html ls.1 -o ls.html             # explicit output path
    man2html ls.1 -o -                   # write to stdout
    man2html - < ls.1                    # read stdin, write stdout
    man2html ls.1 --mode jekyll --permalink /man/ls.html
    man2html --list-modes                # list output modes
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from man2html import __version__
from man2html.converter import Converter
from man2html.output_modes import OutputMode


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="man2html",
        description="Convert man pages (troff man macros) to HTML.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the man page to convert, or - for stdin.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file path, or - for stdout. Defaults to <input>.html.",
    )
    parser.add_argument(
        "-m", "--mode",
        default="html",
        choices=OutputMode.MODES,
        help="Output mode (default: %(default)s).",
    )
    parser.add_argument(
        "--permalink",
        help="Permalink for the Jekyll front matter.",
    )
    parser.add_argument(
        "--layout",
        default="manpage",
        help="Layout for the Jekyll front matter (default: %(default)s).",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-modes",
        action="store_true",
        help="List available output modes and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _convert(converter: Converter, args: argparse.Namespace) -> str:
    """Run the conversion, returning where the output went."""
    if args.input == "-":
        output = args.output or "-"
        if output == "-":
            converter.convert_stream(sys.stdin, sys.stdout, source_name="<stdin>")
        else:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", encoding="utf-8") as outfile:
                converter.convert_stream(sys.stdin, outfile, source_name="<stdin>")
        return output

    input_path = Path(args.input)
    if args.output == "-":
        with input_path.open(encoding=args.encoding) as infile:
            converter.convert_stream(infile, sys.stdout, source_name=str(input_path))
        return "-"

    output_path = Path(args.output) if args.output else input_path.with_name(input_path.name + ".html")
    converter.convert_file(input_path, output_path, encoding=args.encoding)
    return str(output_path)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_modes:
        print("Available output modes:")
        for mode in OutputMode.MODES:
            print(f"  - {mode}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if args.input != "-" and not Path(args.input).is_file():
        print(f"Error: file not found: {args.input}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Input:  {args.input}", file=sys.stderr)
        print(f"Mode:   {args.mode}", file=sys.stderr)

    try:
        converter = Converter(
            mode=args.mode,
            permalink=args.permalink,
            layout=args.layout,
        )
        output = _convert(converter, args)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Output: {output}", file=sys.stderr)
        print(f"Done. {len(converter.diagnostics)} warning(s).", file=sys.stderr)
    elif output != "-":
        print(f"Converted: {output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
