"""man2html - convert man pages (troff ``man`` macros) to HTML."""

__version__ = "0.1.0"
