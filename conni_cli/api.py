"""
HTTP request layer and security helpers for conni-cli.

Everything here is transport: ConfluenceClient (client.py) builds URLs and
payloads and turns HTTPError into RemoteOperationError.
"""

import hashlib
import json
import re
import time
import urllib.error
import urllib.parse
import urllib.request

from conni_cli import config
from conni_cli._utils import log_event
from conni_cli.exceptions import ArgumentParseError, HTTPError, RemoteOperationError

_RETRYABLE_HTTP_CODES = frozenset({429, 502, 503, 504})
_SENSITIVE_QUERY_KEYS = {"token", "apitoken", "api_token", "password"}


# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _safe_json_parse(text, context="input"):
    """Parse JSON with friendly error message on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ArgumentParseError(
            f"'{text}' is not valid JSON in {context}: {e.msg} at position {e.pos}"
        ) from None


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


def _remote_message(body):
    """Pull the human-readable message out of a remote error body.

    The REST API answers with {"statusCode": ..., "message": "..."}; anything
    else is returned sanitized.
    """
    if not body:
        return ""
    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return _sanitize_error(body)
    if isinstance(parsed, dict):
        message = parsed.get("message") or parsed.get("errorMessage")
        if isinstance(message, str) and message.strip():
            return _sanitize_error(message)
    return _sanitize_error(body)


def _sanitize_url_for_log(url):
    """Mask sensitive query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in _SENSITIVE_QUERY_KEYS:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, doseq=True)
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


def _log_http_event(**fields):
    log_event("HTTP", **fields)


def _is_sampled_request(request_id):
    """Decide if a request should be logged based on sample rate."""
    rate = config.HTTP_LOG_SAMPLE_RATE
    if rate <= 0:
        return False
    if rate >= 1:
        return True
    if not request_id:
        return False
    digest = hashlib.sha256(request_id.encode("utf-8")).digest()
    bucket = int.from_bytes(digest[:4], "big") / 4294967295.0
    return bucket < rate


def _error_envelope(message, status=None, request_id=None, retryable=None):
    """Build a consistent CLI-safe HTTP error message."""
    meta = []
    if status is not None:
        meta.append(f"status={status}")
    if request_id:
        meta.append(f"request_id={request_id}")
    if retryable is not None:
        meta.append(f"retryable={'yes' if retryable else 'no'}")
    suffix = f" ({', '.join(meta)})" if meta else ""
    return f"{message}{suffix}"


def _parse_retry_after(headers):
    """Return Retry-After seconds from response headers, or None."""
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        secs = int(str(value).strip())
    except ValueError:
        return None
    return max(0, secs)


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _decode_body(raw, content_type):
    """Decode a JSON response body. Empty bodies (204 No Content) become None."""
    if not raw:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        if content_type and "json" not in content_type.lower():
            raise RemoteOperationError(
                f"Unexpected Content-Type from server ({content_type}). "
                "Check that the profile host points at the wiki base URL."
            ) from None
        raise RemoteOperationError("Unexpected response from server (not valid JSON).") from None


def _http_request(url, data=None, headers=None, method="GET", idempotent=False, raw=False):
    """Make an HTTP request with standard error handling.
    Returns parsed JSON (or bytes when raw=True) on success.
    Raises HTTPError for HTTP errors (caller handles specific codes).
    Raises RemoteOperationError on network/timeout/parse errors."""
    body = json.dumps(data).encode("utf-8") if data is not None else None
    request_id = (headers or {}).get("X-Request-Id")
    safe_url = _sanitize_url_for_log(url)
    sampled = _is_sampled_request(request_id)
    max_attempts = 1 + max(0, config.HTTP_MAX_RETRIES if idempotent else 0)
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    last_timeout = False
    last_url_error = None

    for attempt in range(max_attempts):
        start = time.perf_counter()
        req = urllib.request.Request(url, data=body, headers=headers or {}, method=method)
        if sampled:
            _log_http_event(
                phase="request",
                method=method,
                url=safe_url,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                idempotent=idempotent,
                request_id=request_id,
                timeout_seconds=timeout,
            )
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                content_type = resp.headers.get("Content-Type", "")
                payload = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
                if len(payload) > config.HTTP_MAX_RESPONSE_BYTES:
                    raise RemoteOperationError(
                        f"Response too large (>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                    )
                if sampled:
                    _log_http_event(
                        phase="response",
                        method=method,
                        url=safe_url,
                        attempt=attempt + 1,
                        status=getattr(resp, "status", 200),
                        content_type=content_type,
                        bytes=len(payload),
                        latency_ms=round((time.perf_counter() - start) * 1000, 2),
                        request_id=request_id,
                    )
                if raw:
                    return payload
                return _decode_body(payload, content_type)
        except urllib.error.HTTPError as e:
            error_body = (
                e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
                if e.fp
                else ""
            )
            retryable = e.code in _RETRYABLE_HTTP_CODES
            can_retry = idempotent and attempt < max_attempts - 1 and retryable
            if sampled:
                _log_http_event(
                    phase="response",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    status=e.code,
                    retryable=retryable,
                    will_retry=can_retry,
                    latency_ms=round((time.perf_counter() - start) * 1000, 2),
                    request_id=request_id,
                )
            if can_retry:
                retry_after = _parse_retry_after(getattr(e, "headers", None))
                if retry_after is None:
                    retry_after = config.HTTP_RETRY_BASE_SECONDS * (2**attempt)
                time.sleep(retry_after)
                continue
            raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
        except TimeoutError as e:
            last_timeout = True
            if sampled:
                _log_http_event(
                    phase="network_error",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    error="timeout",
                    will_retry=idempotent and attempt < max_attempts - 1,
                    request_id=request_id,
                )
            if idempotent and attempt < max_attempts - 1:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise RemoteOperationError(
                _error_envelope(
                    f"Request timed out after {timeout} seconds. Is the host reachable?",
                    request_id=request_id,
                    retryable=False,
                )
            ) from e
        except urllib.error.URLError as e:
            last_url_error = e.reason
            if sampled:
                _log_http_event(
                    phase="network_error",
                    method=method,
                    url=safe_url,
                    attempt=attempt + 1,
                    error=f"url_error: {e.reason}",
                    will_retry=idempotent and attempt < max_attempts - 1,
                    request_id=request_id,
                )
            if idempotent and attempt < max_attempts - 1:
                time.sleep(config.HTTP_RETRY_BASE_SECONDS * (2**attempt))
                continue
            raise RemoteOperationError(
                _error_envelope(
                    f"Connection failed: {e.reason}",
                    request_id=request_id,
                    retryable=False,
                )
            ) from e

    if last_timeout:
        raise RemoteOperationError(
            _error_envelope(
                f"Request timed out after {timeout} seconds. Is the host reachable?",
                request_id=request_id,
                retryable=False,
            )
        )
    if last_url_error is not None:
        raise RemoteOperationError(
            _error_envelope(
                f"Connection failed: {last_url_error}",
                request_id=request_id,
                retryable=False,
            )
        )
    raise RemoteOperationError(_error_envelope("Request failed.", request_id=request_id))
