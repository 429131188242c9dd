"""
ConfluenceClient — thin REST wrapper bound to one profile's credentials.

Each instance is a client handle owned by ClientPool. Construction is
offline; every method performs exactly one HTTP call (no caching, no state
beyond credentials). Failures surface as RemoteOperationError.
"""

from __future__ import annotations

import base64
import urllib.parse
import uuid
from typing import Any

from conni_cli.api import (
    _RETRYABLE_HTTP_CODES,
    _error_envelope,
    _http_request,
    _remote_message,
)
from conni_cli.exceptions import HTTPError, RemoteOperationError

_API_PREFIX = "/rest/api"


class ConfluenceClient:
    """REST client for one Confluence site.

    Args:
        host: Base URL including the context path, e.g.
            ``https://example.atlassian.net/wiki``.
        email: Account email used for basic auth.
        api_token: API token paired with *email*.
    """

    def __init__(self, host: str, email: str, api_token: str):
        self.host = host.rstrip("/")
        self.email = email
        self._auth = base64.b64encode(f"{email}:{api_token}".encode()).decode("ascii")
        self.closed = False

    @classmethod
    def from_options(cls, options: dict[str, Any]) -> ConfluenceClient:
        """Build a client from profiles.client_options() output."""
        basic = options["authentication"]["basic"]
        return cls(options["host"], basic["email"], basic["apiToken"])

    def __repr__(self):
        return f"ConfluenceClient(host={self.host!r}, email={self.email!r})"

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------

    def _url(self, path, params=None):
        url = f"{self.host}{_API_PREFIX}{path}"
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        if clean:
            url += "?" + urllib.parse.urlencode(clean, doseq=True)
        return url

    def _headers(self, accept="application/json"):
        return {
            "Authorization": f"Basic {self._auth}",
            "Content-Type": "application/json",
            "Accept": accept,
            "X-Request-Id": str(uuid.uuid4()),
        }

    def _request(self, method, path, params=None, data=None, raw=False):
        if self.closed:
            raise RemoteOperationError(f"Client for {self.host} has been closed.")
        idempotent = method == "GET"
        accept = "*/*" if raw else "application/json"
        try:
            return _http_request(
                self._url(path, params),
                data=data,
                headers=self._headers(accept),
                method=method,
                idempotent=idempotent,
                raw=raw,
            )
        except HTTPError as e:
            raise _remote_error(e, self.host) from e

    # -------------------------------------------------------------------
    # Spaces
    # -------------------------------------------------------------------

    def get_spaces(self, limit=None, start=None) -> dict:
        return self._request("GET", "/space", {"limit": limit, "start": start})

    def get_space(self, space_key: str) -> dict:
        return self._request("GET", f"/space/{_quote(space_key)}")

    # -------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------

    def search_content(self, cql: str, limit: int | None = None, start: int | None = None) -> dict:
        return self._request(
            "GET", "/content/search", {"cql": cql, "limit": limit, "start": start}
        )

    def get_content(self, content_id: str, expand: list[str] | None = None) -> dict:
        params = {"expand": ",".join(expand)} if expand else None
        return self._request("GET", f"/content/{_quote(content_id)}", params)

    def create_content(self, payload: dict) -> dict:
        return self._request("POST", "/content", data=payload)

    def update_content(self, content_id: str, payload: dict) -> dict:
        return self._request("PUT", f"/content/{_quote(content_id)}", data=payload)

    def delete_content(self, content_id: str) -> None:
        self._request("DELETE", f"/content/{_quote(content_id)}")

    def download_attachment(self, container_id: str, attachment_id: str) -> bytes:
        path = (
            f"/content/{_quote(container_id)}/child/attachment/"
            f"{_quote(attachment_id)}/download"
        )
        return self._request("GET", path, raw=True)

    # -------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------

    def get_user(self, account_id: str) -> dict:
        return self._request("GET", "/user", {"accountId": account_id})

    def search_user(self, cql: str, limit: int | None = None) -> dict:
        return self._request("GET", "/search/user", {"cql": cql, "limit": limit})

    def get_current_user(self) -> dict:
        return self._request("GET", "/user/current")

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------

    def close(self) -> None:
        """Drop credentials. urllib keeps no pooled sockets, so nothing else to release."""
        self._auth = ""
        self.closed = True


def _quote(segment):
    return urllib.parse.quote(str(segment), safe="")


def _remote_error(err, host):
    """Convert an HTTPError into a RemoteOperationError with a readable message."""
    if err.code in (401, 403):
        return RemoteOperationError(
            f"Authentication failed for {host} (HTTP {err.code}). "
            "Check the profile's email and API token."
        )
    message = _remote_message(err.body)
    if message:
        return RemoteOperationError(message)
    server_req_id = err.headers.get("X-Request-Id") if err.headers else None
    return RemoteOperationError(
        _error_envelope(
            f"HTTP {err.code}: {err.reason}",
            status=err.code,
            request_id=server_req_id,
            retryable=err.code in _RETRYABLE_HTTP_CODES,
        )
    )
