"""Tests for ConfluenceClient — URL building, auth headers, error conversion.
Mocks at the api._http_request boundary.
"""

import base64
from unittest.mock import patch

import pytest

from conni_cli.client import ConfluenceClient
from conni_cli.exceptions import HTTPError, RemoteOperationError

HOST = "https://docs.example.com/wiki"


@pytest.fixture
def client():
    return ConfluenceClient(HOST + "/", "dev@example.com", "tok-123")


@pytest.fixture
def http():
    with patch("conni_cli.client._http_request") as mock_http:
        mock_http.return_value = {}
        yield mock_http


def _url(http):
    return http.call_args.args[0]


class TestConstruction:
    def test_host_trailing_slash_stripped(self, client):
        assert client.host == HOST

    def test_from_options(self):
        c = ConfluenceClient.from_options(
            {"host": HOST, "authentication": {"basic": {"email": "a@b.co", "apiToken": "t"}}}
        )
        assert c.host == HOST
        assert c.email == "a@b.co"

    def test_repr_hides_token(self, client):
        assert "tok-123" not in repr(client)


class TestRequests:
    def test_basic_auth_header(self, client, http):
        client.get_current_user()
        headers = http.call_args.kwargs["headers"]
        expected = base64.b64encode(b"dev@example.com:tok-123").decode("ascii")
        assert headers["Authorization"] == f"Basic {expected}"
        assert headers["Accept"] == "application/json"
        assert headers["X-Request-Id"]
        assert _url(http) == f"{HOST}/rest/api/user/current"

    def test_get_is_idempotent(self, client, http):
        client.get_space("DOCS")
        assert http.call_args.kwargs["method"] == "GET"
        assert http.call_args.kwargs["idempotent"] is True

    def test_mutations_not_retried(self, client, http):
        client.create_content({"type": "page"})
        assert http.call_args.kwargs["method"] == "POST"
        assert http.call_args.kwargs["idempotent"] is False
        assert http.call_args.kwargs["data"] == {"type": "page"}

    def test_search_content_query(self, client, http):
        client.search_content('type=page AND space="DOCS"', limit=25, start=0)
        url = _url(http)
        assert url.startswith(f"{HOST}/rest/api/content/search?")
        assert "cql=type%3Dpage+AND+space%3D%22DOCS%22" in url
        assert "limit=25" in url
        assert "start=0" in url

    def test_none_params_dropped(self, client, http):
        client.get_spaces()
        assert _url(http) == f"{HOST}/rest/api/space"

    def test_expand_joined(self, client, http):
        client.get_content("42", expand=["body.storage", "version"])
        assert _url(http) == f"{HOST}/rest/api/content/42?expand=body.storage%2Cversion"

    def test_update_and_delete(self, client, http):
        client.update_content("42", {"id": "42"})
        assert http.call_args.kwargs["method"] == "PUT"
        assert _url(http).endswith("/rest/api/content/42")
        client.delete_content("42")
        assert http.call_args.kwargs["method"] == "DELETE"

    def test_download_is_raw(self, client, http):
        http.return_value = b"data"
        assert client.download_attachment("42", "att 1") == b"data"
        assert _url(http) == f"{HOST}/rest/api/content/42/child/attachment/att%201/download"
        assert http.call_args.kwargs["raw"] is True
        assert http.call_args.kwargs["headers"]["Accept"] == "*/*"

    def test_user_lookups(self, client, http):
        client.get_user("abc")
        assert _url(http) == f"{HOST}/rest/api/user?accountId=abc"
        client.search_user('user.fullname~"Jane"', limit=1)
        assert _url(http).startswith(f"{HOST}/rest/api/search/user?cql=")


class TestErrors:
    def test_remote_message_used(self, client, http):
        http.side_effect = HTTPError(404, "Not Found", '{"message": "No space with key : NOPE"}')
        with pytest.raises(RemoteOperationError, match="No space with key : NOPE"):
            client.get_space("NOPE")

    @pytest.mark.parametrize("code", [401, 403])
    def test_auth_failure(self, client, http, code):
        http.side_effect = HTTPError(code, "Unauthorized", "")
        with pytest.raises(RemoteOperationError) as exc_info:
            client.get_current_user()
        assert f"Authentication failed for {HOST} (HTTP {code})" in str(exc_info.value)

    def test_status_fallback(self, client, http):
        http.side_effect = HTTPError(502, "Bad Gateway", "", headers={"X-Request-Id": "srv-9"})
        with pytest.raises(RemoteOperationError) as exc_info:
            client.get_spaces()
        assert str(exc_info.value) == (
            "HTTP 502: Bad Gateway (status=502, request_id=srv-9, retryable=yes)"
        )


class TestClose:
    def test_closed_client_refuses_requests(self, client, http):
        client.close()
        assert client.closed is True
        with pytest.raises(RemoteOperationError, match="has been closed"):
            client.get_spaces()
        http.assert_not_called()
