"""MCP server exposing conni-cli commands as tools.

Package structure:
  __init__.py       FastMCP init, register() calls, re-exports
  __main__.py       ``python -m conni_cli.mcp_server`` entry point
  _core.py          Dispatcher caching and the _call bridge
  _tools_read.py    6 read tools (spaces, pages, users, connection check)
  _tools_write.py   5 mutation/download tools

Every tool returns the command's result envelope as a dict:
``{"success": True, "data": ..., "result": ...}`` or
``{"success": False, "error": "ERROR: ..."}``.

Run: python -m conni_cli.mcp_server
Requires: pip install .[mcp]
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from conni_cli.mcp_server import _tools_read, _tools_write

mcp = FastMCP(
    "conni",
    instructions=(
        "Confluence tools. Every tool accepts an optional profile name; "
        "omit it to use the configured default profile. "
        "Page bodies use Confluence storage format (XHTML). "
        "update_page needs the page's current version number (read it with get_page)."
    ),
)

for _mod in [_tools_read, _tools_write]:
    _mod.register(mcp)

from conni_cli.mcp_server._core import (  # noqa: E402, F401
    _call,
    _get_dispatcher,
    _reset_dispatcher,
)
from conni_cli.mcp_server._tools_read import (  # noqa: E402, F401
    get_page,
    get_space,
    get_user,
    list_pages,
    list_spaces,
    test_connection,
)
from conni_cli.mcp_server._tools_write import (  # noqa: E402, F401
    add_comment,
    create_page,
    delete_page,
    download_attachment,
    update_page,
)


def main():
    """Run the MCP server (stdio transport)."""
    mcp.run()
