"""
Vault Client

The ``Vault`` value holds the configuration and authentication state of a
client. It is immutable: every setter and every successful ``auth`` returns a
new instance, so one instance can be shared freely between threads.
"""

import dataclasses
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import pipeline
from .auth import AuthAdapter
from .codec import Codec, JSONCodec
from .engines import EngineAdapter, Generic
from .exceptions import ConfigurationError, ValidationError
from .models import HTTPMethod
from .transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

_SCHEMES = ("http", "https")


class Vault(BaseModel):
    """
    Client for a HashiCorp Vault instance.

    Example::

        vault = Vault.new(
            host="https://vault.example.com:8200",
            auth_adapter=AppRoleAuth(),
            engine=KVV2(),
        )
        vault = vault.auth({"role_id": role_id, "secret_id": secret_id})
        vault.write("secret/app/db", {"password": "hunter2"})
        vault.read("secret/app/db")

    Options:
        host: address of the Vault instance, including the port if needed.
        transport: ``Transport`` used to make HTTP calls.
        codec: ``Codec`` for request and response bodies. ``None`` passes
            bodies through untouched.
        auth_adapter: ``AuthAdapter`` used by ``auth``.
        auth_path: mount path of the auth backend under ``auth/``. Adapters
            fall back to their own default when unset.
        engine: ``EngineAdapter`` used by ``read``/``write``/``list``/``delete``.
        token: a Vault token.
        token_expires_at: when the token expires, in UTC.
        credentials: login parameters merged into every ``auth`` call.
        transport_options: passed untouched to the transport.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    host: Optional[str] = Field(None, description="Base URL of the Vault instance")
    transport: Optional[Transport] = Field(None, description="HTTP transport")
    codec: Optional[Codec] = Field(None, description="Body codec")
    auth_adapter: Optional[AuthAdapter] = Field(None, description="Authentication adapter")
    auth_path: Optional[str] = Field(None, description="Auth backend mount path")
    engine: Optional[EngineAdapter] = Field(default_factory=Generic, description="Secret engine adapter")
    token: Optional[str] = Field(None, repr=False, description="Current Vault token")
    token_expires_at: Optional[datetime] = Field(None, description="Token expiry, UTC")
    credentials: Dict[Any, Any] = Field(default_factory=dict, repr=False, description="Login parameters")
    transport_options: Dict[str, Any] = Field(default_factory=dict, description="Transport configuration")

    @classmethod
    def new(cls, **options) -> "Vault":
        """
        Create a client with the bundled httpx transport and JSON codec.

        ``host`` defaults to the ``VAULT_ADDR`` environment variable. Pass
        ``transport=None`` or ``codec=None`` explicitly to leave them unset.
        """
        options.setdefault("host", os.environ.get("VAULT_ADDR"))
        options.setdefault("transport", HttpxTransport())
        options.setdefault("codec", JSONCodec())
        return cls(**options)

    @field_validator("host")
    @classmethod
    def _normalize_host(cls, host: Optional[str]) -> Optional[str]:
        return None if host is None else normalize_host(host)

    @field_validator("auth_path")
    @classmethod
    def _normalize_auth_path(cls, auth_path: Optional[str]) -> Optional[str]:
        return None if auth_path is None else auth_path.lstrip("/")

    @field_validator("token_expires_at")
    @classmethod
    def _as_utc(cls, expires_at: Optional[datetime]) -> Optional[datetime]:
        if expires_at is not None and expires_at.tzinfo is None:
            return expires_at.replace(tzinfo=timezone.utc)
        return expires_at

    def _replace(self, **changes) -> "Vault":
        return type(self)(**{**dict(self), **changes})

    # Configuration

    def set_host(self, host: str) -> "Vault":
        """Set the address of the Vault instance. ``https://`` is assumed without a scheme."""
        return self._replace(host=host)

    def set_transport(self, transport: Optional[Transport]) -> "Vault":
        return self._replace(transport=transport)

    def set_codec(self, codec: Optional[Codec]) -> "Vault":
        return self._replace(codec=codec)

    def set_engine(self, engine: Optional[EngineAdapter]) -> "Vault":
        return self._replace(engine=engine)

    def set_auth(self, auth_adapter: Optional[AuthAdapter]) -> "Vault":
        return self._replace(auth_adapter=auth_adapter)

    def set_auth_path(self, auth_path: str) -> "Vault":
        """Set the mount path used when logging in, e.g. ``"approle-ci"``."""
        return self._replace(auth_path=auth_path)

    def set_credentials(self, credentials: Mapping) -> "Vault":
        """Replace the stored login parameters."""
        return self._replace(credentials=dict(credentials))

    def set_transport_options(self, transport_options: Mapping[str, Any]) -> "Vault":
        return self._replace(transport_options=dict(transport_options))

    def set_token(
        self,
        token: Optional[str],
        ttl: Optional[int] = None,
        expires_at: Optional[datetime] = None,
    ) -> "Vault":
        """Set a token directly. Without ``ttl`` or ``expires_at`` it is treated as expired."""
        if ttl is not None:
            expires_at = _utcnow() + timedelta(seconds=ttl)
        return self._replace(token=token, token_expires_at=expires_at)

    # Authentication

    def auth(self, params: Any = None, **kwargs) -> "Vault":
        """
        Authenticate against the configured auth backend.

        Stored credentials are merged with ``params`` (passed values win), so
        re-authenticating can omit unchanged fields. ``params`` may be a
        mapping or an object carrying the credentials as attributes, such as
        a dataclass or a pydantic model. Returns a new client
        holding the token, its expiry and the merged credentials.
        """
        if self.transport is None:
            raise ConfigurationError(["http client not set"])
        if self.auth_adapter is None:
            raise ConfigurationError(["auth client not set"])

        credentials = {**(self.credentials or {}), **credentials_dict(params), **kwargs}
        result = self.auth_adapter.login(self, credentials)
        expires_at = _utcnow() + timedelta(seconds=result.ttl)

        mount = self.auth_adapter.mount_path(self)
        logger.info(
            f"Authenticated with {type(self.auth_adapter).__name__} at auth/{mount}, "
            f"token expires at {expires_at.isoformat()}"
        )
        return self._replace(token=result.token, token_expires_at=expires_at, credentials=credentials)

    def token_expired(self) -> bool:
        """True when no expiry is known or the expiry has passed."""
        if self.token_expires_at is None:
            return True
        return self.token_expires_at < _utcnow()

    # Secrets

    def read(self, path: str, **options) -> Any:
        """
        Read a secret from the configured engine.

        Bundled engines return the ``data`` of Vault's response, or the whole
        response with ``full_response=True``.
        """
        return self._require_engine().read(self, path.lstrip("/"), **options)

    def write(self, path: str, value: Any, **options) -> Dict[str, Any]:
        """
        Write a secret to the configured engine.

        Returns the written value under ``"value"`` merged with whatever the
        engine returned (e.g. the new version). Engine keys take precedence; a
        non-mapping result is kept under ``"data"``.
        """
        data = self._require_engine().write(self, path.lstrip("/"), value, **options)
        if data is None:
            return {"value": value}
        if isinstance(data, Mapping):
            return {"value": value, **data}
        return {"value": value, "data": data}

    def list(self, path: str, **options) -> Any:
        """List the keys under ``path``, e.g. ``{"keys": ["a", "b/"]}``."""
        return self._require_engine().list(self, path.lstrip("/"), **options)

    def delete(self, path: str, **options) -> Any:
        """Delete a secret. Vault typically answers with an empty body, returned as ``{}``."""
        return self._require_engine().delete(self, path.lstrip("/"), **options)

    def request(self, method: Union[str, HTTPMethod], path: str, **options) -> Any:
        """
        Make an HTTP request with the current token, for APIs without a
        dedicated method, e.g. renewing a lease::

            vault.request("put", "sys/leases/renew", body={"lease_id": lease_id})

        Options are ``body``, ``query_params``, ``headers`` and ``version``.
        """
        if self.transport is None:
            raise ConfigurationError(["http client not set."])
        if self.host is None:
            raise ConfigurationError(["host not set."])
        return pipeline.request(self, method, path, **options)

    def _require_engine(self) -> EngineAdapter:
        if self.transport is None:
            raise ConfigurationError(["http client not set"])
        if self.engine is None:
            raise ConfigurationError(["secret engine not set"])
        return self.engine


def normalize_host(host: str) -> str:
    """Strip trailing slashes and default to ``https://`` when no scheme is given."""
    host = host.strip()
    scheme, separator, _ = host.partition("://")
    if not separator:
        host = f"https://{host}"
    elif scheme.lower() not in _SCHEMES:
        raise ValueError(f"Unsupported scheme for vault host: {scheme}")
    return host.rstrip("/")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def credentials_dict(params: Any) -> Dict[Any, Any]:
    """Shallow copy of login params given as a mapping or an object with attributes."""
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    if isinstance(params, BaseModel):
        return params.model_dump()
    if dataclasses.is_dataclass(params) and not isinstance(params, type):
        return {field.name: getattr(params, field.name) for field in dataclasses.fields(params)}
    try:
        return dict(vars(params))
    except TypeError:
        raise ValidationError(["Credentials must be a mapping or an object with attributes", params])
