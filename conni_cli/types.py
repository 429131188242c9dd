"""Typed shapes for the ``data`` field of successful ResultEnvelopes.

These TypedDicts document the simplified payloads built in commands.py.
Commands that pass remote objects through unchanged (get-page, get-space,
create-page, ...) return plain dicts.
"""

from __future__ import annotations

from typing import Any, TypedDict


class SpaceRow(TypedDict):
    key: str
    name: str
    type: str
    id: str


class PageRow(TypedDict):
    id: str
    title: str
    type: str
    status: str
    spaceKey: str | None


class AttachmentDownload(TypedDict):
    fileName: str
    filePath: str
    fileSize: int
    mediaType: str


class ConnectionCheck(TypedDict):
    currentUser: dict[str, Any]


class MutationResult(TypedDict, total=False):
    pageId: str
    version: int
    deleted: bool
