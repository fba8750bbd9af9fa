#!/usr/bin/env python3
"""
Moorcheh API transport - endpoint registry and HTTP client.

Every outbound call goes through :class:`APIClient`, which attaches the
configured credential and turns failed exchanges into classified
exceptions:

    401             -> UnauthorizedError
    403             -> ForbiddenError
    other non-2xx   -> APIError
    connect/timeout -> NetworkError

Each call is a single attempt. There is no retry and no timeout beyond the
httpx defaults.
"""

from __future__ import annotations

import json
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .constants import (
    ALLOWED_METHODS,
    ANSWER_PATH,
    DEFAULT_BASE_URL,
    NAMESPACES_PATH,
    SEARCH_PATH,
)

logger = logging.getLogger(__name__)

USER_AGENT = "moorcheh-mcp"


# =============================================================================
# Errors
# =============================================================================

class MoorchehError(Exception):
    """Base class for failed calls to the Moorcheh API."""
    pass


class APIError(MoorchehError):
    """The API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UnauthorizedError(APIError):
    """HTTP 401: the API key is invalid or expired."""
    pass


class ForbiddenError(APIError):
    """HTTP 403: the API key lacks permission for the call."""
    pass


class NetworkError(MoorchehError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""
    pass


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def classify_response_error(response: httpx.Response) -> APIError:
    """Build the exception matching a failed response's status code."""
    status = response.status_code
    body = _response_body(response)
    rendered = json.dumps(body)

    if status == 401:
        return UnauthorizedError(
            f"Unauthorized: Invalid API key. Status: {status}, Response: {rendered}",
            status, body,
        )
    if status == 403:
        return ForbiddenError(
            f"Forbidden: Check your API key. Status: {status}, Response: {rendered}",
            status, body,
        )
    return APIError(f"API Error ({status}): {rendered}", status, body)


# =============================================================================
# Endpoint Registry
# =============================================================================

@dataclass(frozen=True)
class Endpoints:
    """Absolute URLs of the API resources, fixed from one base URL."""
    base_url: str = DEFAULT_BASE_URL

    @property
    def namespaces(self) -> str:
        return f"{self.base_url}{NAMESPACES_PATH}"

    @property
    def search(self) -> str:
        return f"{self.base_url}{SEARCH_PATH}"

    @property
    def answer(self) -> str:
        return f"{self.base_url}{ANSWER_PATH}"

    def namespace(self, name: str, *parts: str) -> str:
        """
        URL of one namespace, optionally with a sub-path.

        Example:
            >>> Endpoints().namespace("docs", "documents/delete")
            'https://api.moorcheh.ai/v1/namespaces/docs/documents/delete'
        """
        url = f"{self.namespaces}/{quote(name, safe='')}"
        for part in parts:
            url = f"{url}/{part}"
        return url


# =============================================================================
# Client
# =============================================================================

class APIClient:
    """
    Async HTTP client for the Moorcheh API.

    Holds no per-call state; concurrent requests share only the underlying
    connection pool.
    """

    def __init__(
        self,
        api_key: str,
        endpoints: Optional[Endpoints] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoints = endpoints or Endpoints()
        self._client = httpx.AsyncClient(
            headers={
                "x-api-key": api_key,
                "Authorization": f"Bearer {api_key}",
                "User-Agent": USER_AGENT,
            },
            transport=transport,
        )

    async def __aenter__(self) -> APIClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, url: str, body: Any = None) -> Any:
        """
        Perform one JSON request and return the parsed response.

        Args:
            method: GET, POST or DELETE
            url: Absolute URL built from :attr:`endpoints`
            body: JSON-serializable request body, if any

        Returns:
            Parsed JSON response ({} for an empty body)

        Raises:
            ValueError: Unsupported method
            APIError: Non-2xx response (401/403 as subclasses)
            NetworkError: No response was received
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        logger.debug(f"{method} {url}")
        kwargs: dict[str, Any] = {}
        if body is not None:
            kwargs["json"] = body
        response = await self._send(method, url, **kwargs)
        return self._parse(response)

    async def upload_file(self, url: str, path: Path) -> Any:
        """
        Post a local file as multipart form data.

        The caller is responsible for checking the file beforehand
        (see ``tools.check_upload_file``).
        """
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        logger.debug(f"POST {url} (file {path.name})")
        with open(path, "rb") as fh:
            response = await self._send(
                "POST", url, files={"file": (path.name, fh, content_type)}
            )
        return self._parse(response)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"{method} {url} failed: {type(e).__name__}")
            raise NetworkError(f"Network Error: {e}") from e

        if not response.is_success:
            error = classify_response_error(response)
            logger.warning(f"{method} {url} returned HTTP {response.status_code}")
            raise error
        return response

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        return _response_body(response)
