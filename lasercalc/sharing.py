"""
Share links and embed snippets.

A share link carries the calculator inputs in its query string:
scalars as plain parameters, nested dicts/lists JSON-encoded in one
parameter each. parse_share_params() turns such a query back into inputs.
"""

import html
import json
import re
from urllib.parse import urlencode

from .config import settings

# Plain decimal literals only: no inf/nan, no digit separators
_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


def calculator_url(calculator_id: str, base_url: str = None) -> str:
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{base}/calculators/{calculator_id}"


def _encode_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    return str(value)


def build_share_url(calculator_id: str, inputs: dict, base_url: str = None) -> str:
    """Inputs -> stable URL. Keys are sorted; None values are left out."""
    params = [(key, _encode_value(value)) for key, value in sorted((inputs or {}).items())
              if value is not None]
    url = calculator_url(calculator_id, base_url)
    if not params:
        return url
    return f"{url}?{urlencode(params)}"


def _decode_value(raw: str):
    text = raw.strip()
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if text[:1] in ("{", "["):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return raw
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return raw


def parse_share_params(params) -> dict:
    """Query parameters (any mapping of str -> str) back to typed inputs."""
    return {key: _decode_value(value) for key, value in dict(params).items()}


def build_embed_code(calculator_id: str, base_url: str = None, width: int = None,
                     height: int = None, responsive: bool = False, title: str = None) -> str:
    """Static <iframe> snippet for embedding a calculator in another page."""
    src = html.escape(f"{calculator_url(calculator_id, base_url)}?embed=true", quote=True)
    width = width or settings.EMBED_DEFAULT_WIDTH
    height = height or settings.EMBED_DEFAULT_HEIGHT
    title = html.escape(title or calculator_id.replace("_", " ").title(), quote=True)

    if responsive:
        ratio = height / width * 100
        return (
            f'<div style="position:relative;width:100%;padding-bottom:{ratio:.2f}%;height:0;overflow:hidden;">'
            f'<iframe src="{src}" title="{title}" '
            f'style="position:absolute;top:0;left:0;width:100%;height:100%;border:0;" '
            f'loading="lazy" allowfullscreen></iframe>'
            f'</div>'
        )
    return (
        f'<iframe src="{src}" title="{title}" width="{width}" height="{height}" '
        f'style="border:0;" loading="lazy" allowfullscreen></iframe>'
    )
