# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
HttpRequest - the ``request`` object the host injects into scripts.

Invalid methods raise InvalidMethodError. Transport failures do not
raise: they come back as a degraded HttpResponse with status 0 and an
error message, so scripts must check ``success``.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from blip_utils.errors import InvalidMethodError

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD", "TRACE")
DEFAULT_METHOD = "GET"
DEFAULT_TIMEOUT = 30.0


@dataclass
class HttpRequestOptions:
    """Validated options for one request."""

    method: str = DEFAULT_METHOD
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None

    def __post_init__(self) -> None:
        self.method = self.method or DEFAULT_METHOD
        self.headers = self.headers or {}
        if self.method not in HTTP_METHODS:
            raise InvalidMethodError(f"'{self.method}' is not a valid method")

    def has_body(self) -> bool:
        """A body is only sent for non-GET requests that supply one.

        Empty containers count as supplied; empty scalars (None, "", 0,
        False) do not.
        """
        if self.method == DEFAULT_METHOD or self.body is None:
            return False
        return isinstance(self.body, (dict, list)) or bool(self.body)

    def serialized_body(self) -> Optional[str]:
        return json.dumps(self.body) if self.has_body() else None


@dataclass
class HttpResponse:
    """Response handed back to scripts.

    ``json`` is None when the body is not valid JSON.
    """

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    json: Any = None
    success: bool = False
    error: Optional[str] = None

    @classmethod
    def from_response(cls, response: requests.Response) -> "HttpResponse":
        body = response.text
        return cls(
            status=response.status_code,
            headers=dict(response.headers),
            body=body,
            json=_parse_json(body),
            success=200 <= response.status_code < 300,
        )

    @classmethod
    def failed(cls, error: str) -> "HttpResponse":
        """Degraded response for a transport failure."""
        return cls(status=0, headers={}, body=None, json=None, success=False, error=error)

    async def json_async(self) -> Any:
        return self.json


def _parse_json(body: Optional[str]) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


class HttpRequest:
    """Performs HTTP requests on behalf of a script."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    async def fetch_async(
        self,
        url: str,
        method: str = DEFAULT_METHOD,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> HttpResponse:
        """
        Perform a request and wrap the response.

        Args:
            url: Request URL.
            method: One of HTTP_METHODS.
            headers: Request headers.
            body: JSON-serializable body, ignored for GET.

        Returns:
            HttpResponse; a degraded one (status 0) on transport failure.

        Raises:
            InvalidMethodError: If method is not a standard HTTP verb.
        """
        options = HttpRequestOptions(method=method, headers=headers or {}, body=body)
        logger.debug(f"{options.method} {url}")

        try:
            response = await asyncio.to_thread(
                requests.request,
                options.method,
                url,
                headers=options.headers,
                data=options.serialized_body(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Request failed: {options.method} {url}: {e}")
            return HttpResponse.failed(str(e))

        return HttpResponse.from_response(response)
