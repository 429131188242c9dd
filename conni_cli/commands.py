"""
Command implementations for conni-cli.
Each cmd_*() function receives a client handle, the effective output format
and the validated keyword arguments for one command, and returns a
ResultEnvelope.

Argument validation and error conversion live in dispatcher.py; these bodies
may raise freely.
"""

import os

from conni_cli._utils import format_size
from conni_cli.exceptions import RemoteOperationError
from conni_cli.formatters import format_result
from conni_cli.models import ResultEnvelope
from conni_cli.types import (
    AttachmentDownload,
    ConnectionCheck,
    MutationResult,
    PageRow,
    SpaceRow,
)

DEFAULT_PAGE_LIMIT = 25
DEFAULT_PAGE_START = 0
DEFAULT_FILE_NAME = "download"
DEFAULT_MEDIA_TYPE = "application/octet-stream"

PAGE_EXPAND = ["body.storage", "version", "space"]
ATTACHMENT_EXPAND = ["container", "metadata.mediaType", "version"]


def _ok(data, fmt):
    return ResultEnvelope.ok(data, format_result(data, fmt))


def _storage_body(body):
    return {"storage": {"value": body, "representation": "storage"}}


def _cql_quote(value):
    return '"' + str(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_page_cql(space_key=None, title=None):
    """CQL for page searches; no filters means every page."""
    parts = ["type=page"]
    if space_key:
        parts.append(f"space={_cql_quote(space_key)}")
    if title:
        parts.append(f"title~{_cql_quote(title)}")
    return " AND ".join(parts)


# ---------------------------------------------------------------------------
# Read commands
# ---------------------------------------------------------------------------


def cmd_list_spaces(client, fmt):
    response = client.get_spaces() or {}
    spaces = [
        SpaceRow(
            key=space.get("key"),
            name=space.get("name"),
            type=space.get("type"),
            id=str(space.get("id")),
        )
        for space in response.get("results") or []
    ]
    return _ok(spaces, fmt)


def cmd_get_space(client, fmt, space_key):
    return _ok(client.get_space(space_key), fmt)


def cmd_list_pages(client, fmt, space_key=None, title=None, limit=None, start=None):
    if limit is None:
        limit = DEFAULT_PAGE_LIMIT
    if start is None:
        start = DEFAULT_PAGE_START
    cql = build_page_cql(space_key, title)
    response = client.search_content(cql=cql, limit=limit, start=start) or {}
    pages = [
        PageRow(
            id=page.get("id"),
            title=page.get("title"),
            type=page.get("type"),
            status=page.get("status"),
            spaceKey=(page.get("space") or {}).get("key"),
        )
        for page in response.get("results") or []
    ]
    return _ok(pages, fmt)


def cmd_get_page(client, fmt, page_id):
    return _ok(client.get_content(page_id, expand=PAGE_EXPAND), fmt)


def cmd_get_user(client, fmt, account_id=None, username=None):
    if account_id:
        return _ok(client.get_user(account_id), fmt)
    if username:
        response = client.search_user(cql=f"user.fullname~{_cql_quote(username)}", limit=1) or {}
        results = response.get("results") or []
        if not results:
            raise RemoteOperationError(f'User "{username}" not found')
        return _ok(results[0], fmt)
    return _ok(client.get_current_user(), fmt)


def cmd_test_connection(client, fmt, profile=None):
    user = client.get_current_user() or {}
    lines = ["Connection successful!"]
    if profile:
        lines.append(f"Profile: {profile}")
    lines.append(f"Logged in as: {user.get('displayName', 'unknown')}")
    email = user.get("email")
    if email:
        lines.append(f"Email: {email}")
    return ResultEnvelope.ok(ConnectionCheck(currentUser=user), "\n".join(lines))


# ---------------------------------------------------------------------------
# Mutation commands
# ---------------------------------------------------------------------------


def cmd_create_page(client, fmt, space_key, title, body, parent_id=None):
    payload = {
        "type": "page",
        "title": title,
        "space": {"key": space_key},
        "body": _storage_body(body),
    }
    if parent_id:
        payload["ancestors"] = [{"id": parent_id}]
    return _ok(client.create_content(payload), fmt)


def cmd_update_page(client, fmt, page_id, title, body, version):
    # version is the page's current number; the remote expects the next one.
    next_version = version + 1
    client.update_content(
        page_id,
        {
            "id": page_id,
            "type": "page",
            "body": _storage_body(body),
            "title": title,
            "version": {"number": next_version},
        },
    )
    return ResultEnvelope.ok(
        MutationResult(pageId=page_id, version=next_version),
        f"Page {page_id} updated successfully!",
    )


def cmd_add_comment(client, fmt, page_id, body):
    page = client.get_content(page_id, expand=["space"]) or {}
    payload = {
        "type": "comment",
        "container": {"id": page_id, "type": "page"},
        "title": "",
        "space": {"key": (page.get("space") or {}).get("key")},
        "body": _storage_body(body),
    }
    return _ok(client.create_content(payload), fmt)


def cmd_delete_page(client, fmt, page_id):
    client.delete_content(page_id)
    return ResultEnvelope.ok(
        MutationResult(pageId=page_id, deleted=True),
        f"Page {page_id} deleted successfully!",
    )


def cmd_download_attachment(client, fmt, attachment_id, output_path=None):
    attachment = client.get_content(attachment_id, expand=ATTACHMENT_EXPAND) or {}
    container_id = (attachment.get("container") or {}).get("id")
    if not container_id:
        raise RemoteOperationError("Parent content ID not found in attachment metadata")

    file_name = attachment.get("title") or DEFAULT_FILE_NAME
    media_type = (attachment.get("metadata") or {}).get("mediaType") or DEFAULT_MEDIA_TYPE
    content = client.download_attachment(container_id, attachment_id) or b""

    file_path = output_path or os.path.join(os.getcwd(), file_name)
    parent = os.path.dirname(file_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(file_path, "wb") as f:
        f.write(content)

    data = AttachmentDownload(
        fileName=file_name,
        filePath=file_path,
        fileSize=len(content),
        mediaType=media_type,
    )
    result = "\n".join(
        [
            "Attachment downloaded successfully!",
            f"File: {file_name}",
            f"Saved to: {file_path}",
            f"Size: {format_size(len(content))}",
            f"Type: {media_type}",
        ]
    )
    return ResultEnvelope.ok(data, result)
