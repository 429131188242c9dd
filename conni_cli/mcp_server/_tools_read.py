"""Read tools: spaces, pages, users and the connection check."""

from __future__ import annotations

from typing import Literal

from conni_cli.mcp_server._core import _call

Format = Literal["json", "toon"]


def list_spaces(profile: str | None = None, format: Format | None = None) -> dict:
    """List all spaces visible to the profile's account.

    Returns:
        Envelope dict: success, data (key/name/type/id rows), result (rendered text).
    """
    return _call("list-spaces", profile=profile, format=format)


def get_space(space_key: str, profile: str | None = None, format: Format | None = None) -> dict:
    """Get one space by key (e.g. 'DOCS')."""
    return _call("get-space", profile=profile, format=format, space_key=space_key)


def list_pages(
    space_key: str | None = None,
    title: str | None = None,
    limit: int | None = None,
    start: int | None = None,
    profile: str | None = None,
    format: Format | None = None,
) -> dict:
    """Search pages. Filters combine with AND.

    Args:
        space_key: Restrict to one space.
        title: Fuzzy title match.
        limit/start: Pagination (default 25/0).
    """
    return _call(
        "list-pages",
        profile=profile,
        format=format,
        space_key=space_key,
        title=title,
        limit=limit,
        start=start,
    )


def get_page(page_id: str, profile: str | None = None, format: Format | None = None) -> dict:
    """Get one page with its storage body, version, space and ancestors."""
    return _call("get-page", profile=profile, format=format, page_id=page_id)


def get_user(
    account_id: str | None = None,
    username: str | None = None,
    profile: str | None = None,
    format: Format | None = None,
) -> dict:
    """Look up a user by account id, or by display name when no id is given."""
    return _call(
        "get-user", profile=profile, format=format, account_id=account_id, username=username
    )


def test_connection(profile: str | None = None) -> dict:
    """Check credentials for a profile by fetching the current user."""
    return _call("test-connection", profile=profile)


def register(mcp):
    """Register all read tools with the FastMCP instance."""
    mcp.tool()(list_spaces)
    mcp.tool()(get_space)
    mcp.tool()(list_pages)
    mcp.tool()(get_page)
    mcp.tool()(get_user)
    mcp.tool()(test_connection)
