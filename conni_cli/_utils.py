"""
Shared pure-utility functions for conni-cli.

These helpers have no business logic. The only side effect is the opt-in
stderr event log used by api.py and pool.py.
"""

import json
import sys

from conni_cli import config


def _mask_token(token):
    """Show only first 6 chars of a token for safe logging."""
    return token[:6] + "..." if len(token) > 6 else token


def log_event(channel, **fields):
    """Emit a structured log line to stderr when HTTP logging is enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print(f"[{channel}] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def is_blank(value):
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def format_size(num_bytes):
    """Human-readable byte count: 512 B, 16.00 KB, 1.50 MB."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.2f} KB"
    if num_bytes < 1024 * 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.2f} MB"
    return f"{num_bytes / (1024 * 1024 * 1024):.2f} GB"
