"""Tests for the HTTP transport: endpoints, headers and error classification."""

import asyncio
import json

import httpx
import pytest

from moorcheh_mcp.api import (
    APIClient,
    APIError,
    Endpoints,
    ForbiddenError,
    NetworkError,
    UnauthorizedError,
    classify_response_error,
)


def _client(handler):
    return APIClient("test-key-0123456789", transport=httpx.MockTransport(handler))


# ============================================================================
# Endpoint registry
# ============================================================================

class TestEndpoints:
    """Tests for URL construction."""

    def test_default_base_url(self):
        """Default endpoints point at the public API."""
        endpoints = Endpoints()
        assert endpoints.namespaces == "https://api.moorcheh.ai/v1/namespaces"
        assert endpoints.search == "https://api.moorcheh.ai/v1/search"
        assert endpoints.answer == "https://api.moorcheh.ai/v1/answer"

    def test_namespace_sub_path(self):
        """Sub-paths are appended after the namespace name."""
        url = Endpoints().namespace("docs", "documents/delete")
        assert url == "https://api.moorcheh.ai/v1/namespaces/docs/documents/delete"

    def test_namespace_name_is_quoted(self):
        """Names with reserved characters stay a single path segment."""
        url = Endpoints().namespace("a b/c")
        assert url.endswith("/namespaces/a%20b%2Fc")

    def test_custom_base_url(self):
        """A custom base URL is used for every endpoint."""
        endpoints = Endpoints("https://staging.example.com/v2")
        assert endpoints.search == "https://staging.example.com/v2/search"


# ============================================================================
# Error classification
# ============================================================================

class TestClassifyResponseError:
    """Tests for mapping failed responses to exceptions."""

    def test_401_is_unauthorized(self):
        """401 names the invalid key and echoes the body."""
        error = classify_response_error(httpx.Response(401, json={"message": "bad key"}))
        assert isinstance(error, UnauthorizedError)
        assert "Unauthorized: Invalid API key" in str(error)
        assert "Status: 401" in str(error)
        assert "bad key" in str(error)

    def test_403_is_forbidden(self):
        """403 text differs from 401 text."""
        error = classify_response_error(httpx.Response(403, json={"message": "nope"}))
        assert isinstance(error, ForbiddenError)
        assert "Forbidden: Check your API key" in str(error)
        assert "Unauthorized" not in str(error)

    def test_other_status_is_generic(self):
        """Other statuses carry the status code and body."""
        error = classify_response_error(httpx.Response(500, json={"message": "boom"}))
        assert type(error) is APIError
        assert error.status_code == 500
        assert str(error) == 'API Error (500): {"message": "boom"}'

    def test_non_json_body(self):
        """A plain-text error body is kept as text."""
        error = classify_response_error(httpx.Response(502, text="Bad Gateway"))
        assert error.body == "Bad Gateway"
        assert "Bad Gateway" in str(error)


# ============================================================================
# Client
# ============================================================================

class TestAPIClient:
    """Tests for APIClient requests."""

    def test_auth_headers_attached(self):
        """Every request carries the API key headers."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        result = asyncio.run(_client(handler).request("GET", Endpoints().namespaces))
        assert result == {"ok": True}
        assert seen[0].headers["x-api-key"] == "test-key-0123456789"
        assert seen[0].headers["authorization"] == "Bearer test-key-0123456789"

    def test_json_body_sent(self):
        """POST bodies are sent as JSON."""
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={})

        asyncio.run(_client(handler).request("POST", Endpoints().search, {"query": "x"}))
        assert seen == [{"query": "x"}]

    def test_empty_response_body(self):
        """An empty 2xx body parses to an empty dict."""
        result = asyncio.run(
            _client(lambda r: httpx.Response(204)).request("DELETE", Endpoints().namespace("x"))
        )
        assert result == {}

    def test_unsupported_method(self):
        """Methods outside GET/POST/DELETE are refused before sending."""
        with pytest.raises(ValueError, match="Unsupported HTTP method"):
            asyncio.run(_client(lambda r: httpx.Response(200)).request("PATCH", "https://x"))

    def test_401_raises_unauthorized(self):
        """Non-2xx responses raise the classified error."""
        client = _client(lambda r: httpx.Response(401, json={}))
        with pytest.raises(UnauthorizedError):
            asyncio.run(client.request("GET", Endpoints().namespaces))

    def test_network_failure(self):
        """Transport failures become NetworkError."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError, match="Network Error"):
            asyncio.run(_client(handler).request("GET", Endpoints().namespaces))

    def test_upload_file_multipart(self, tmp_path):
        """Files are posted as multipart form data under 'file'."""
        path = tmp_path / "notes.md"
        path.write_text("# notes")
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"fileName": "notes.md"})

        result = asyncio.run(_client(handler).upload_file(Endpoints().namespace("d", "upload-file"), path))
        assert result == {"fileName": "notes.md"}
        assert seen[0].headers["content-type"].startswith("multipart/form-data")
        assert b'name="file"; filename="notes.md"' in seen[0].content
        assert b"# notes" in seen[0].content
