"""Write tools: page and comment mutations, attachment download."""

from __future__ import annotations

from typing import Literal

from conni_cli.mcp_server._core import _call

Format = Literal["json", "toon"]


def create_page(
    space_key: str,
    title: str,
    body: str,
    parent_id: str | None = None,
    profile: str | None = None,
    format: Format | None = None,
) -> dict:
    """Create a page. Body is Confluence storage format (XHTML)."""
    return _call(
        "create-page",
        profile=profile,
        format=format,
        space_key=space_key,
        title=title,
        body=body,
        parent_id=parent_id,
    )


def update_page(
    page_id: str, title: str, body: str, version: int, profile: str | None = None
) -> dict:
    """Replace a page's title and body.

    Args:
        version: The page's CURRENT version number; the update writes version + 1.
    """
    return _call(
        "update-page",
        profile=profile,
        page_id=page_id,
        title=title,
        body=body,
        version=version,
    )


def add_comment(
    page_id: str, body: str, profile: str | None = None, format: Format | None = None
) -> dict:
    """Add a footer comment (storage format) to a page."""
    return _call("add-comment", profile=profile, format=format, page_id=page_id, body=body)


def delete_page(page_id: str, profile: str | None = None) -> dict:
    """Delete a page (moves it to the space trash)."""
    return _call("delete-page", profile=profile, page_id=page_id)


def download_attachment(
    attachment_id: str, output_path: str | None = None, profile: str | None = None
) -> dict:
    """Download an attachment to *output_path* (default: its own file name in cwd)."""
    return _call(
        "download-attachment",
        profile=profile,
        attachment_id=attachment_id,
        output_path=output_path,
    )


def register(mcp):
    """Register all write tools with the FastMCP instance."""
    mcp.tool()(create_page)
    mcp.tool()(update_page)
    mcp.tool()(add_comment)
    mcp.tool()(delete_page)
    mcp.tool()(download_attachment)
