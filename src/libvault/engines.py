"""
Secret engine adapters.

Each engine turns ``read``/``write``/``list``/``delete`` into concrete Vault
HTTP calls through the request pipeline, and unwraps Vault's response
envelope into the secret data.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

from . import pipeline
from .exceptions import NotFoundError, UnexpectedResponseError, ValidationError, VaultResponseError
from .models import HTTPMethod

if TYPE_CHECKING:
    from .client import Vault


class EngineAdapter(ABC):
    """Base class for secret engines."""

    @abstractmethod
    def read(self, vault: "Vault", path: str, **options) -> Any:
        """Read the secret stored at ``path``."""
        pass

    @abstractmethod
    def write(self, vault: "Vault", path: str, value: Any, **options) -> Any:
        """Store ``value`` at ``path``."""
        pass

    @abstractmethod
    def list(self, vault: "Vault", path: str, **options) -> Any:
        """List the keys available under ``path``."""
        pass

    @abstractmethod
    def delete(self, vault: "Vault", path: str, **options) -> Any:
        """Delete the secret stored at ``path``."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))


class Generic(EngineAdapter):
    """
    A generic engine. Most Vault secret engines follow the same REST
    conventions, so this covers engines without a dedicated adapter
    (cubbyhole, ssh, transit, database, ...).

    By default ``read`` sends a GET, ``write`` a POST, ``list`` a GET with
    ``list=true`` and ``delete`` a DELETE.

    Options:
        method: HTTP verb to use instead of the default.
        full_response: return the whole decoded body instead of its ``data`` key.
        query_params: query parameters for the request.
        body: request body. Defaults to the written value on ``write`` and
            ``{}`` otherwise.
    """

    def read(self, vault: "Vault", path: str, **options) -> Any:
        return self._dispatch(vault, path, {}, {"method": HTTPMethod.GET, **options})

    def write(self, vault: "Vault", path: str, value: Any, **options) -> Any:
        return self._dispatch(vault, path, value, {"method": HTTPMethod.POST, **options})

    def list(self, vault: "Vault", path: str, **options) -> Any:
        query_params = dict(options.get("query_params") or {})
        query_params["list"] = "true"
        options = {"method": HTTPMethod.GET, **options, "query_params": query_params}
        return self._dispatch(vault, path, {}, options)

    def delete(self, vault: "Vault", path: str, **options) -> Any:
        return self._dispatch(vault, path, {}, {"method": HTTPMethod.DELETE, **options})

    def _dispatch(self, vault: "Vault", path: str, value: Any, options: Dict[str, Any]) -> Any:
        body = pipeline.request(
            vault,
            options.get("method", HTTPMethod.POST),
            path,
            body=options.get("body", value),
            query_params=options.get("query_params"),
        )
        return unwrap(body, full_response=options.get("full_response", False))


class KVV1(Generic):
    """
    The unversioned key/value engine.

    See: https://developer.hashicorp.com/vault/api-docs/secret/kv/kv-v1
    """


class KVV2(Generic):
    """
    The versioned key/value engine.

    Every sub-resource sits directly under the mount point, so
    ``secret/app/db`` is read from ``secret/data/app/db`` and listed from
    ``secret/metadata/app/db``.

    See: https://developer.hashicorp.com/vault/api-docs/secret/kv/kv-v2

    Options:
        read: ``version`` (int) to fetch a specific version, ``full_response``.
        write: ``cas`` (int) check-and-set guard. ``0`` only writes when the key
            does not exist, ``n`` only when the current version is ``n``.
        delete: ``versions`` (required, list of int) and ``destroy`` (bool) to
            remove the versions permanently instead of soft-deleting them.
    """

    def read(self, vault: "Vault", path: str, **options) -> Any:
        version = options.pop("version", None)
        if version is not None:
            query_params = dict(options.get("query_params") or {})
            query_params["version"] = version
            options["query_params"] = query_params

        data = super().read(vault, subresource_path(path, "data"), **options)
        if options.get("full_response", False):
            return data

        # A soft-deleted version comes back as a 200 with null data
        if not isinstance(data, dict) or data.get("data") is None:
            raise NotFoundError(["Key not found"])
        return data["data"]

    def write(self, vault: "Vault", path: str, value: Any, **options) -> Any:
        cas = options.pop("cas", None)
        payload: Dict[str, Any] = {"data": value}
        if cas is not None:
            payload["options"] = {"cas": cas}
        return super().write(vault, subresource_path(path, "data"), payload, **options)

    def list(self, vault: "Vault", path: str, **options) -> Any:
        return super().list(vault, subresource_path(path, "metadata"), **options)

    def delete(self, vault: "Vault", path: str, **options) -> Any:
        versions = options.pop("versions", None)
        destroy = options.pop("destroy", False)
        if not _is_version_list(versions):
            raise ValidationError(["A list of versions is required"])

        target = subresource_path(path, "destroy" if destroy else "delete")
        options = {**options, "method": HTTPMethod.POST}
        return self._dispatch(vault, target, {"versions": list(versions)}, options)


def unwrap(body: Any, full_response: bool = False) -> Any:
    """Extract the payload from a Vault response envelope."""
    if body is None:
        return {}

    if isinstance(body, dict) and "errors" in body:
        if not body["errors"]:
            raise NotFoundError(["Key not found"])
        raise VaultResponseError(body["errors"])

    if isinstance(body, dict) and full_response:
        return body

    if isinstance(body, dict) and "data" in body:
        return body["data"]

    raise UnexpectedResponseError(["Unknown response from vault", body])


def subresource_path(path: str, subresource: str) -> str:
    """Insert ``subresource`` between the mount point and the rest of ``path``."""
    mount, _, rest = path.partition("/")
    return f"{mount}/{subresource}/{rest}"


def _is_version_list(versions: Any) -> bool:
    if not isinstance(versions, (list, tuple)) or not versions:
        return False
    return all(isinstance(v, int) and not isinstance(v, bool) for v in versions)
