"""
Core HTTP client for the Crisp REST API.

Handles authentication, request/response, envelope decoding, and error handling.
"""

import base64
import http.client
import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from crisp_cli.core.types import unwrap_envelope

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://api.crisp.chat/v1/"
DEFAULT_TIER = "plugin"
DEFAULT_TIMEOUT = 60
USER_AGENT = "crisp-cli/0.1.0"

METHODS = ("HEAD", "GET", "PATCH", "DELETE", "POST", "PUT")
BODILESS_METHODS = ("GET", "HEAD")

# Reserved characters already present in a path are kept, everything else is quoted
_URL_SAFE_CHARS = "/:?#[]@!$&'()*+,;=%~"

T = TypeVar("T")


@dataclass(frozen=True)
class Response:
    """Status, headers and raw body of an HTTP response."""

    status: int
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        """Check if the status is 2xx."""
        return 200 <= self.status < 300


class CrispError(Exception):
    """Base error class for Crisp client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(CrispError):
    """Non-2xx API response with status code and Crisp error reason."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        reason: str | None = None,
        details: dict | None = None,
        response: Response | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.reason = reason
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.reason:
            result["reason"] = self.reason
        return result


class TransportError(CrispError):
    """Network-level failure: connection, DNS, TLS or timeout."""


class DecodeError(CrispError):
    """Response body could not be decoded into the requested type."""

    def __init__(self, message: str, response: Response, details: dict | None = None):
        super().__init__(message, details)
        self.response = response


def _clean_base_url(url: str) -> str:
    return url.strip().rstrip("/") + "/"


class APIClient:
    """
    Low-level HTTP client for the Crisp REST API.

    Handles:
    - Authentication via identifier/key pair and tier header
    - HTTP methods (HEAD, GET, PATCH, DELETE, POST, PUT)
    - Unwrapping of the {"data": ...} response envelope
    - Error handling and response parsing

    Instances hold read-only configuration and may be shared between threads.
    """

    def __init__(
        self,
        identifier: str | None = None,
        key: str | None = None,
        tier: str | None = None,
        base_url: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the API client.

        Args:
            identifier: Crisp token identifier (or CRISP_API_IDENTIFIER env var)
            key: Crisp token key (or CRISP_API_KEY env var)
            tier: Token tier sent as X-Crisp-Tier (or CRISP_API_TIER env var)
            base_url: API base URL (or CRISP_API_BASE_URL env var)
            timeout: Request timeout in seconds

        """
        self.identifier = identifier or os.environ.get("CRISP_API_IDENTIFIER")
        self.key = key or os.environ.get("CRISP_API_KEY")
        self.tier = tier or os.environ.get("CRISP_API_TIER", DEFAULT_TIER)
        self.base_url = _clean_base_url(base_url or os.environ.get("CRISP_API_BASE_URL", DEFAULT_BASE_URL))
        self.timeout = timeout

    def _auth_header(self) -> str:
        """Build the Basic auth header, ensuring credentials are configured."""
        if not self.identifier or not self.key:
            raise CrispError("CRISP_API_IDENTIFIER and CRISP_API_KEY environment variables not set")
        token = base64.b64encode(f"{self.identifier}:{self.key}".encode()).decode("ascii")
        return f"Basic {token}"

    def build_url(self, path: str) -> str:
        """Resolve a relative API path against the base URL."""
        quoted = urllib.parse.quote(path, safe=_URL_SAFE_CHARS)
        return urllib.parse.urljoin(self.base_url, quoted)

    def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        parser: Callable[[Any], T] | None = None,
    ) -> tuple[T | None, Response]:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (HEAD, GET, PATCH, DELETE, POST, PUT)
            path: API path relative to the base URL (e.g., plugin/{id}/stars)
            body: JSON-serializable request body, ignored for GET and HEAD
            parser: Function building the result from the envelope "data" field.
                When omitted, the response body is not decoded.

        Returns:
            Tuple of (parsed payload or None, response descriptor)

        Raises:
            APIError: On non-2xx status
            TransportError: On connection errors and timeouts
            DecodeError: On malformed JSON when a parser was supplied

        """
        method = method.upper()
        if method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = self.build_url(path)
        headers = {
            "Authorization": self._auth_header(),
            "X-Crisp-Tier": self.tier,
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        if method in BODILESS_METHODS:
            body = None
        data = json.dumps(body).encode("utf-8") if body is not None else None

        logger.debug("%s %s", method, url)
        response = self._send(urllib.request.Request(url, data=data, headers=headers, method=method))
        logger.debug("%s %s -> %d", method, url, response.status)

        if not response.ok:
            raise self._api_error(response)

        if parser is None or not response.body:
            return None, response

        try:
            payload = json.loads(response.body.decode("utf-8"))
            return unwrap_envelope(payload, parser), response
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Invalid JSON response: {e}", response) from e
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeError(f"Unexpected response shape: {e}", response) from e

    def _send(self, req: urllib.request.Request) -> Response:
        """Send a prepared request, returning a descriptor for any HTTP status."""
        try:
            try:
                with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                    return Response(
                        status=resp.status,
                        method=req.get_method(),
                        url=req.full_url,
                        headers=dict(resp.headers.items()),
                        body=resp.read(),
                    )
            except urllib.error.HTTPError as e:
                return Response(
                    status=e.code,
                    method=req.get_method(),
                    url=req.full_url,
                    headers=dict(e.headers.items()) if e.headers else {},
                    body=e.read() if e.fp else b"",
                )

        except TimeoutError as e:
            logger.warning("%s %s timed out", req.get_method(), req.full_url)
            raise TransportError(f"Request timed out after {self.timeout} seconds") from e

        except urllib.error.URLError as e:
            logger.warning("%s %s failed: %s", req.get_method(), req.full_url, e.reason)
            raise TransportError(f"Connection error: {e.reason}") from e

        # Dropped or reset connections and truncated bodies bypass URLError
        except (OSError, http.client.HTTPException) as e:
            logger.warning("%s %s failed: %r", req.get_method(), req.full_url, e)
            raise TransportError(f"Connection error: {e!r}") from e

    def _api_error(self, response: Response) -> APIError:
        """Build an APIError from a non-2xx response."""
        message = f"HTTP {response.status} on {response.method} {response.url}"
        logger.warning("HTTP %d on %s %s", response.status, response.method, response.url)
        try:
            error_data = json.loads(response.body.decode("utf-8")) if response.body else None
        except (UnicodeDecodeError, json.JSONDecodeError):
            error_data = None

        if not isinstance(error_data, dict):
            return APIError(message, status=response.status, response=response)

        # Crisp errors look like {"error": true, "reason": "not_found", "data": {}}
        reason = error_data.get("reason")
        if not isinstance(reason, str):
            reason = None
        return APIError(
            f"{message}: {reason}" if reason else message,
            status=response.status,
            reason=reason,
            details=error_data,
            response=response,
        )

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def head(self, path: str) -> Response:
        """Make a HEAD request."""
        return self.execute("HEAD", path)[1]

    def get(self, path: str, parser: Callable[[Any], T]) -> tuple[T | None, Response]:
        """Make a GET request and decode the envelope."""
        return self.execute("GET", path, parser=parser)

    def patch(self, path: str, body: Any = None) -> Response:
        """Make a PATCH request."""
        return self.execute("PATCH", path, body)[1]

    def delete(self, path: str, body: Any = None) -> Response:
        """Make a DELETE request."""
        return self.execute("DELETE", path, body)[1]
