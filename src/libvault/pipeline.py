"""
Request pipeline.

Builds and parses every HTTP call made against Vault: URL assembly, token
header injection, body encoding and response decoding. Transport and codec
failures come out of here as ``VaultError`` subclasses.

Requests take the following keyword options:

- ``body``: structured value for the request body. Defaults to ``{}``;
  ``None`` sends no body.
- ``query_params``: mapping or ordered list of pairs. Do not put a query
  string on the path.
- ``headers``: extra ``(name, value)`` pairs, sent after ``X-Vault-Token``.
- ``version``: the Vault API version, defaults to ``"v1"``.
"""

import logging
from typing import TYPE_CHECKING, Any, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

from .exceptions import (
    ConfigurationError,
    HTTPAdapterError,
    TransportError,
    UnknownResponseError,
    ValidationError,
)
from .models import Header, HTTPMethod, TransportResponse

if TYPE_CHECKING:
    from .client import Vault

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Vault-Token"
DEFAULT_VERSION = "v1"

QueryParams = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

_NOT_SET = object()


def request(
    vault: "Vault",
    method: Union[str, HTTPMethod],
    path: str,
    *,
    body: Any = _NOT_SET,
    query_params: Optional[QueryParams] = None,
    headers: Optional[List[Header]] = None,
    version: str = DEFAULT_VERSION,
) -> Any:
    """Make a request against the configured Vault instance and return the decoded body."""
    if vault.transport is None:
        raise ConfigurationError(["http client not set."])

    try:
        method = HTTPMethod.coerce(method).value
    except ValueError:
        allowed = [m.value for m in HTTPMethod]
        raise ValidationError([f"invalid method. Must be one of: {allowed}"])

    body = {} if body is _NOT_SET else body
    url = build_url(vault.host, version, path, query_params)

    request_headers = [(TOKEN_HEADER, vault.token)] if vault.token else []
    request_headers.extend(headers or [])

    encoded = _encode(vault.codec, body)
    logger.debug(f"{method} {url}")

    try:
        result = vault.transport.request(
            method, url, encoded, request_headers, vault.transport_options
        )
    except TransportError as e:
        logger.error(f"Http adapter failed for {method} {url}: {e.details}")
        raise HTTPAdapterError(["Http Adapter error", e.details])

    if not isinstance(result, TransportResponse):
        raise UnknownResponseError(["Unknown response", repr(result)])

    return _decode(vault.codec, result.body)


def build_url(
    host: Optional[str],
    version: str,
    path: str,
    query_params: Optional[QueryParams] = None,
) -> str:
    """Compose ``host/version/path?query``."""
    url = f"{host}/{version}/{path.lstrip('/')}"
    query = urlencode(query_params or {}, doseq=True)
    return f"{url}?{query}" if query else url


def get(vault: "Vault", path: str, **options) -> Any:
    """Make a GET request. See module options."""
    return request(vault, HTTPMethod.GET, path, **options)


def head(vault: "Vault", path: str, **options) -> Any:
    """Make a HEAD request. See module options."""
    return request(vault, HTTPMethod.HEAD, path, **options)


def put(vault: "Vault", path: str, **options) -> Any:
    """Make a PUT request. See module options."""
    return request(vault, HTTPMethod.PUT, path, **options)


def post(vault: "Vault", path: str, **options) -> Any:
    """Make a POST request. See module options."""
    return request(vault, HTTPMethod.POST, path, **options)


def patch(vault: "Vault", path: str, **options) -> Any:
    """Make a PATCH request. See module options."""
    return request(vault, HTTPMethod.PATCH, path, **options)


def delete(vault: "Vault", path: str, **options) -> Any:
    """Make a DELETE request. See module options."""
    return request(vault, HTTPMethod.DELETE, path, **options)


def _encode(codec, body: Any) -> Any:
    if body is None:
        return None
    if codec is None:
        return body
    return codec.encode(body)


def _decode(codec, payload: Union[bytes, str]) -> Any:
    if payload in (b"", ""):
        return None
    if codec is None:
        return payload
    return codec.decode(payload)
