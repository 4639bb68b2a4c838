import html
import json

from fastapi.responses import HTMLResponse
from pydantic import BaseModel

SUCCESS_COLOR = "#4caf50"
ERROR_COLOR = "#d32f2f"
WARNING_COLOR = "#ff9800"

MESSAGE_ELEMENT_ID = "delivery-message"

_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_PAGE = """<!doctype html>
<html lang="en">
  <head><meta charset="utf-8"><title>{title}</title></head>
  <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px; text-align: center;">
    <h1 style="color: {color};">{title}</h1>
{body}
  </body>
</html>
"""

_DELIVERY_SCRIPT = """    <script id="{element_id}" type="application/json">{message}</script>
    <script>
      (function () {{
        var message = JSON.parse(document.getElementById("{element_id}").textContent);
        var status = document.getElementById("status");
        if (window.opener) {{
          window.opener.postMessage(message, {target_origin});
          status.textContent = "Done! You can close this window.";
          setTimeout(function () {{ window.close(); }}, {close_delay_ms});
        }} else {{
          status.textContent = "Could not communicate with the window that started the login. Please close this window and try again.";
        }}
      }})();
    </script>"""


def script_json(value: object) -> str:
    """Serialize ``value`` to JSON that is safe inside a ``<script>`` element."""
    if isinstance(value, BaseModel):
        raw = value.model_dump_json(by_alias=True)
    else:
        raw = json.dumps(value)

    for character, escape in _SCRIPT_ESCAPES.items():
        raw = raw.replace(character, escape)

    return raw


def paragraph(text: str, color: str = "#666") -> str:
    return f'    <p style="color: {color};">{html.escape(text)}</p>'


def html_page(
    title: str, body: str, status_code: int = 200, color: str = SUCCESS_COLOR
) -> HTMLResponse:
    content = _PAGE.format(title=html.escape(title), color=color, body=body)

    return HTMLResponse(content, status_code=status_code)


def error_page(
    title: str,
    error: str,
    error_description: str | None = None,
    status_code: int = 400,
    hint: str = "You can close this window and try again.",
) -> HTMLResponse:
    body = "\n".join(
        [
            f"    <p><strong>Error:</strong> {html.escape(error)}</p>",
            "    <p><strong>Description:</strong> "
            f"{html.escape(error_description or 'No description provided')}</p>",
            paragraph(hint),
        ]
    )

    return html_page(title, body, status_code=status_code, color=ERROR_COLOR)


def delivery_page(
    message: BaseModel,
    *,
    lead: str,
    target_origin: str = "*",
    close_delay_ms: int = 2000,
    warning: str | None = None,
) -> HTMLResponse:
    """Render the page that hands ``message`` to ``window.opener``."""
    lines = [paragraph(lead)]

    if warning:
        lines.append(paragraph(warning, color=WARNING_COLOR))

    lines.append('    <p id="status" style="color: #999;"></p>')
    lines.append(
        _DELIVERY_SCRIPT.format(
            element_id=MESSAGE_ELEMENT_ID,
            message=script_json(message),
            target_origin=script_json(target_origin),
            close_delay_ms=int(close_delay_ms),
        )
    )

    return html_page("Authentication Successful", "\n".join(lines))
