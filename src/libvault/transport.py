"""
HTTP transports.

A transport performs exactly one HTTP exchange. Retries, TLS and redirect
policy live here, configured through the client's ``transport_options``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Union

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import HTTPOptions
from .exceptions import TransportError
from .models import Header, TransportResponse

logger = logging.getLogger(__name__)

_BODYLESS_METHODS = ("GET", "DELETE", "HEAD")
_REDACTED_HEADERS = ("x-vault-token", "authorization")
_EMPTY_BODIES = (None, "", b"", "{}", b"{}", {})


class Transport(ABC):
    """Base class for HTTP transports."""

    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        body: Optional[Union[bytes, str]],
        headers: List[Header],
        options: Mapping[str, Any],
    ) -> TransportResponse:
        """Perform one request, raising TransportError when it cannot complete."""
        pass


class HttpxTransport(Transport):
    """
    Transport built on httpx.

    A fresh ``httpx.Client`` is opened per request unless one is injected, in
    which case the caller owns its lifecycle.
    """

    def __init__(self, client: Optional[httpx.Client] = None):
        self._client = client

    def request(
        self,
        method: str,
        url: str,
        body: Optional[Union[bytes, str]],
        headers: List[Header],
        options: Mapping[str, Any],
    ) -> TransportResponse:
        config = HTTPOptions.model_validate(dict(options or {}))

        # Vault rejects JSON bodies on these verbs
        if method in _BODYLESS_METHODS and body in _EMPTY_BODIES:
            body = None
        if body is not None and not isinstance(body, (bytes, str)):
            raise TransportError(f"Unsupported body type for {method} {url}: {type(body).__name__}")

        if config.log_requests:
            logger.debug(f"{method} {url} headers={_redact(headers)}")

        retryer = Retrying(
            stop=stop_after_attempt(config.max_retries + 1),
            wait=wait_exponential(multiplier=config.retry_backoff_factor, max=config.retry_max_wait),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

        try:
            response = retryer(self._send, config, method, url, body, headers)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Request failed: {method} {url}: {e}")
            raise TransportError(f"{type(e).__name__}: {e}")

        if config.log_responses:
            logger.debug(f"{method} {url} -> {response.status_code}")

        return TransportResponse(
            status=response.status_code,
            headers=list(response.headers.items()),
            body=response.content,
        )

    def _send(self, config, method, url, body, headers) -> httpx.Response:
        if self._client is not None:
            return self._client.request(
                method,
                url,
                content=body,
                headers=headers,
                timeout=config.timeout,
                follow_redirects=config.follow_redirects,
            )

        with httpx.Client(
            timeout=config.timeout,
            limits=httpx.Limits(
                max_keepalive_connections=config.max_connections,
                max_connections=config.max_connections,
            ),
            verify=config.verify,
            follow_redirects=config.follow_redirects,
        ) as client:
            return client.request(method, url, content=body, headers=headers)


def _redact(headers: List[Header]) -> List[Header]:
    return [
        (name, "***" if name.lower() in _REDACTED_HEADERS else value)
        for name, value in headers
    ]
