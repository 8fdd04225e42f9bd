"""Debug error page.

Rendered with plain f-strings rather than kida so a broken template or
view setup cannot hide the error that caused it. Shows the exception
type and message, the file and line it was raised from, the traceback
and the request that triggered it.
"""

import html
import sys
import traceback
from typing import Any

_CSS = """
body{font-family:ui-monospace,Menlo,Consolas,monospace;background:#1a1b26;color:#c0caf5;margin:0}
.error-page{max-width:1100px;margin:0 auto;padding:24px}
h1{color:#f7768e;font-size:1.4em;margin:0 0 8px}
h2{color:#7aa2f7;font-size:1.05em;border-bottom:1px solid #2f334d;padding-bottom:4px}
.exc-message{background:#24283b;padding:12px;border-left:3px solid #f7768e;white-space:pre-wrap}
.location{color:#9ece6a;margin:8px 0}
pre{background:#24283b;padding:12px;overflow-x:auto}
.request-line{display:flex;gap:12px;padding:2px 0}
.label{color:#bb9af7;min-width:140px}
"""


def _esc(text: Any) -> str:
    return html.escape(str(text), quote=True)


def _origin(exc: BaseException) -> tuple[str, int]:
    """File and line of the innermost frame, where the exception was raised."""
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "<unknown>", 0
    last = frames[-1]
    return last.filename, last.lineno or 0


def _line(label: str, value: Any) -> str:
    return (
        f'<div class="request-line"><span class="label">{_esc(label)}</span>'
        f"<span>{_esc(value)}</span></div>"
    )


def _render_request(request: Any) -> str:
    if request is None:
        return ""
    parts = [_line("Method", request.method), _line("Path", request.url)]
    parts.extend(_line(name, request.headers.get(name)) for name in request.headers)
    try:
        params = request.params
    except ValueError as exc:
        params = f"<unparseable: {exc}>"
    if params:
        parts.append(_line("Params", params))
    return "".join(parts)


def render_debug_page(exc: BaseException, request: Any = None, route: Any = None) -> str:
    """Render a full HTML debug page for *exc*."""
    exc_type = type(exc).__name__
    module = type(exc).__module__ or ""
    qualified = f"{module}.{exc_type}" if module and module != "builtins" else exc_type
    filename, lineno = _origin(exc)
    trace = "".join(traceback.format_exception(exc))

    sections = [
        f"<h1>{_esc(qualified)}</h1>",
        f'<div class="exc-message">{_esc(exc)}</div>',
        f'<div class="location">{_esc(filename)}:{lineno}</div>',
        "<h2>Traceback</h2>",
        f"<pre>{_esc(trace)}</pre>",
    ]
    if route is not None:
        sections.append("<h2>Route</h2>")
        sections.append(_line(f"{route.method} {route.pattern}", route.handler))
    if request is not None:
        sections.append("<h2>Request</h2>")
        sections.append(_render_request(request))
    sections.append("<h2>Environment</h2>")
    sections.append(_line("Python", sys.version))

    body = "\n".join(sections)
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        f"<title>{_esc(qualified)}: {_esc(str(exc)[:80])}</title>"
        f"<style>{_CSS}</style>"
        f'</head><body><div class="error-page">{body}</div></body></html>'
    )
