"""Output formatting: JSON and TOON renderings of command payloads."""

import json

from toon_format import encode as toon_encode

from conni_cli import config
from conni_cli.exceptions import CliError


def format_json(data):
    """Two-space indented JSON. ``None`` renders as ``null``."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_toon(data):
    """Compact token-oriented rendering. ``None`` renders as an empty string."""
    if data is None:
        return ""
    return toon_encode(data)


_FORMATTERS = {
    "json": format_json,
    "toon": format_toon,
}


def format_result(data, fmt=config.DEFAULT_FORMAT):
    """Render *data* in the requested format without modifying it."""
    try:
        formatter = _FORMATTERS[fmt]
    except KeyError:
        raise CliError(
            f"Invalid format '{fmt}'. Use: {', '.join(config.VALID_FORMATS)}"
        ) from None
    return formatter(data)
