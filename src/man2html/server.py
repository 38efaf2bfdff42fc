"""FastAPI web service for man page to HTML conversion.

Endpoints::

    POST /convert       Upload a man page file and receive HTML back.
    POST /convert/text  Send raw man page source, receive HTML.
    GET  /health        Health check.
    GET  /modes         List available output modes.

Each conversion response carries the number of warnings in the
``X-Man2html-Warnings`` header.

Run::

    uvicorn man2html.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse

from man2html import __version__
from man2html.converter import Converter
from man2html.output_modes import ConfigurationError, OutputMode

app = FastAPI(
    title="man2html",
    description="man page to HTML conversion service",
    version=__version__,
)

WARNINGS_HEADER = "X-Man2html-Warnings"


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _make_converter(mode: str, permalink: str, layout: str) -> Converter:
    try:
        return Converter(mode=mode, permalink=permalink or None, layout=layout or None)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/modes")
async def list_modes() -> dict[str, list[str]]:
    """List available output modes."""
    return {"modes": OutputMode.MODES}


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    mode: str = Form("html"),
    encoding: str = Form("utf-8"),
    permalink: str = Form(""),
    layout: str = Form("manpage"),
) -> HTMLResponse:
    """Upload a man page and receive HTML back.

    - **file**: man page source (``ls.1``)
    - **mode**: Output mode (html, jekyll, raw)
    - **encoding**: Source file encoding
    - **permalink**, **layout**: Jekyll front matter values
    """
    converter = _make_converter(mode, permalink, layout)

    raw = await file.read()
    try:
        man_text = raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise HTTPException(status_code=400, detail=f"cannot decode upload: {exc}") from exc

    source_name = file.filename or "upload"
    html = converter.convert_text(man_text, source_name=source_name)

    return HTMLResponse(
        content=html,
        headers={
            "Content-Disposition": _content_disposition(source_name + ".html"),
            WARNINGS_HEADER: str(len(converter.diagnostics)),
        },
    )


@app.post("/convert/text")
async def convert_text(
    source: str = Form(...),
    mode: str = Form("html"),
    permalink: str = Form(""),
    layout: str = Form("manpage"),
) -> HTMLResponse:
    """Send raw man page source and receive HTML.

    - **source**: troff source using the man macros
    - **mode**: Output mode
    """
    converter = _make_converter(mode, permalink, layout)
    html = converter.convert_text(source, source_name="<text>")

    return HTMLResponse(
        content=html,
        headers={WARNINGS_HEADER: str(len(converter.diagnostics))},
    )
