"""
Authentication adapters for libvault.

An adapter turns login credentials into one Vault login call and extracts the
client token and its lease duration from the response.

Writing your own adapter usually means subclassing ``LoginAdapter`` and
declaring the credential model and the mount path it defaults to::

    class RadiusCredentials(Credentials):
        username: StrictStr
        password: StrictStr

    class RadiusAuth(LoginAdapter):
        default_mount_path = "radius"
        credentials_model = RadiusCredentials

See https://developer.hashicorp.com/vault/api-docs/auth for the login APIs.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from . import pipeline
from .exceptions import (
    HTTPAdapterError,
    NotFoundError,
    UnexpectedResponseError,
    UnknownResponseError,
    ValidationError,
    VaultResponseError,
)
from .models import Header, HTTPMethod, LoginResult

if TYPE_CHECKING:
    from .client import Vault

logger = logging.getLogger(__name__)

JSON_HEADERS: List[Header] = [("Content-Type", "application/json")]


class Credentials(BaseModel):
    """Base model for login credentials."""
    model_config = ConfigDict(extra="ignore", frozen=True)


class AuthAdapter(ABC):
    """Base class for authentication adapters."""

    default_mount_path: Optional[str] = None

    @abstractmethod
    def login(self, vault: "Vault", params: Any) -> LoginResult:
        """Log in and return the client token with its ttl in seconds."""
        pass

    def mount_path(self, vault: "Vault") -> Optional[str]:
        """The configured auth path, or this adapter's default when unset."""
        return vault.auth_path or self.default_mount_path

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))


class LoginAdapter(AuthAdapter):
    """
    Shared shape of Vault's login backends: validate the credentials, POST
    them to ``auth/<mount>/login`` and read ``auth.client_token`` and
    ``auth.lease_duration`` from the response.
    """

    credentials_model: Type[Credentials] = Credentials
    method: HTTPMethod = HTTPMethod.POST
    token_path: Sequence[str] = ("auth", "client_token")
    ttl_path: Sequence[str] = ("auth", "lease_duration")

    def login(self, vault: "Vault", params: Any) -> LoginResult:
        credentials = self.validate(params)
        mount = self.mount_path(vault)
        path = self.login_path(mount, credentials)
        logger.debug(f"{type(self).__name__} login against auth/{mount}")

        try:
            body = pipeline.request(
                self.request_client(vault),
                self.method,
                path,
                body=self.login_body(credentials),
                headers=self.login_headers(credentials),
            )
        except (HTTPAdapterError, UnknownResponseError) as e:
            raise HTTPAdapterError(["Http adapter error", e.errors])

        return self.parse_response(body)

    def validate(self, params: Any) -> Credentials:
        """Normalize mapping or attribute-style params into the credential model."""
        try:
            if isinstance(params, Mapping):
                return self.credentials_model.model_validate(normalize_keys(params))
            return self.credentials_model.model_validate(params, from_attributes=True)
        except PydanticValidationError:
            raise ValidationError([self.missing_credentials_message(), params])

    def missing_credentials_message(self) -> str:
        fields = [
            name for name, field in self.credentials_model.model_fields.items() if field.is_required()
        ]
        verb = "is" if len(fields) == 1 else "are"
        return f"Missing credentials - {' and '.join(fields)} {verb} required."

    def login_path(self, mount: str, credentials: Credentials) -> str:
        return f"auth/{mount}/login"

    def login_body(self, credentials: Credentials) -> Any:
        return credentials.model_dump()

    def login_headers(self, credentials: Credentials) -> List[Header]:
        return list(JSON_HEADERS)

    def request_client(self, vault: "Vault") -> "Vault":
        return vault

    def parse_response(
        self,
        body: Any,
        token_path: Optional[Sequence[str]] = None,
        ttl_path: Optional[Sequence[str]] = None,
    ) -> LoginResult:
        if isinstance(body, dict) and body.get("errors"):
            raise VaultResponseError(body["errors"])

        token = dig(body, token_path or self.token_path)
        ttl = dig(body, ttl_path or self.ttl_path)
        if token is None or ttl is None:
            raise UnexpectedResponseError(["Unexpected response from vault.", body])

        return LoginResult(token, ttl)


class RoleSecretCredentials(Credentials):
    role_id: StrictStr
    secret_id: StrictStr


class UsernamePasswordCredentials(Credentials):
    username: StrictStr
    password: StrictStr


class RoleJWTCredentials(Credentials):
    role: StrictStr
    jwt: StrictStr


class TokenCredentials(Credentials):
    token: StrictStr


class AppRoleAuth(LoginAdapter):
    """
    AppRole authentication with a role id and secret id.

    See: https://developer.hashicorp.com/vault/api-docs/auth/approle
    """

    default_mount_path = "approle"
    credentials_model = RoleSecretCredentials


class UserPassAuth(LoginAdapter):
    """
    Username and password authentication. The username is part of the login
    path; only the password is sent in the body.

    See: https://developer.hashicorp.com/vault/api-docs/auth/userpass
    """

    default_mount_path = "userpass"
    credentials_model = UsernamePasswordCredentials

    def login_path(self, mount: str, credentials: Credentials) -> str:
        return f"auth/{mount}/login/{credentials.username}"

    def login_body(self, credentials: Credentials) -> Any:
        return {"password": credentials.password}


class LDAPAuth(UserPassAuth):
    """
    LDAP authentication with a username and password.

    See: https://developer.hashicorp.com/vault/api-docs/auth/ldap
    """

    default_mount_path = "ldap"


class JWTAuth(LoginAdapter):
    """
    JWT/OIDC authentication with a role and a signed JWT.

    See: https://developer.hashicorp.com/vault/api-docs/auth/jwt
    """

    default_mount_path = "jwt"
    credentials_model = RoleJWTCredentials


class AzureAuth(JWTAuth):
    """
    Azure authentication with a role and a managed identity JWT.

    See: https://developer.hashicorp.com/vault/api-docs/auth/azure
    """

    default_mount_path = "azure"


class GoogleCloudAuth(JWTAuth):
    """
    Google Cloud authentication with a role and a signed JWT.

    See: https://developer.hashicorp.com/vault/api-docs/auth/gcp
    """

    default_mount_path = "gcp"


class GitHubAuth(LoginAdapter):
    """
    GitHub authentication with a personal access token.

    See: https://developer.hashicorp.com/vault/api-docs/auth/github
    """

    default_mount_path = "github"
    credentials_model = TokenCredentials


class TokenAuth(LoginAdapter):
    """
    Validates an existing Vault token with a self lookup and keeps it when it
    is valid. Handy for local development with ``~/.vault-token``.

    See: https://developer.hashicorp.com/vault/api-docs/auth/token#lookup-a-token-self
    """

    default_mount_path = "token"
    credentials_model = TokenCredentials
    method = HTTPMethod.GET
    token_path = ("data", "id")
    ttl_path = ("data", "ttl")

    def login_path(self, mount: str, credentials: Credentials) -> str:
        return f"auth/{mount}/lookup-self"

    def login_body(self, credentials: Credentials) -> Any:
        return None

    def login_headers(self, credentials: Credentials) -> List[Header]:
        return [(pipeline.TOKEN_HEADER, credentials.token)] + list(JSON_HEADERS)

    def request_client(self, vault: "Vault") -> "Vault":
        # The token under test is sent explicitly, not the current one
        return vault.model_copy(update={"token": None, "token_expires_at": None})


class GenericRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: StrictStr = Field(..., description="Login path after auth/, e.g. jwt/login")
    method: HTTPMethod = Field(HTTPMethod.POST, description="HTTP verb")
    body: Any = Field(default_factory=dict, description="Login parameters")

    @field_validator("method", mode="before")
    @classmethod
    def _coerce_method(cls, value):
        return HTTPMethod.coerce(value)


class GenericResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: List[str] = Field(["auth", "client_token"], description="Key path to the token")
    ttl: List[str] = Field(["auth", "lease_duration"], description="Key path to the ttl")


class GenericCredentials(Credentials):
    request: GenericRequest
    response: GenericResponse = Field(default_factory=GenericResponse)


class GenericAuth(LoginAdapter):
    """
    Authenticate against any backend by describing the request and where the
    token sits in the response::

        vault.auth({
            "request": {"path": "jwt/login", "body": {"role": "dev", "jwt": jwt}},
            "response": {"token": ["auth", "client_token"], "ttl": ["auth", "lease_duration"]},
        })

    ``request.method`` defaults to POST, ``request.body`` to ``{}``, and the
    response paths to ``auth.client_token`` / ``auth.lease_duration``.
    """

    credentials_model = GenericCredentials

    def login(self, vault: "Vault", params: Any) -> LoginResult:
        credentials = self.validate(params)
        request = credentials.request

        try:
            body = pipeline.request(
                vault,
                request.method,
                f"auth/{request.path.lstrip('/')}",
                body=request.body,
                headers=list(JSON_HEADERS),
            )
        except (HTTPAdapterError, UnknownResponseError) as e:
            raise HTTPAdapterError(["Http adapter error", e.errors])

        if isinstance(body, dict) and body.get("errors") == []:
            raise NotFoundError(["Key not found"])

        return self.parse_response(body, credentials.response.token, credentials.response.ttl)


def normalize_keys(params: Mapping) -> Dict[str, Any]:
    """Key a mapping by plain strings, accepting Enum members and bytes as keys."""
    normalized = {}
    for key, value in params.items():
        if isinstance(key, Enum):
            key = key.value
        elif isinstance(key, bytes):
            key = key.decode()
        normalized[str(key)] = value
    return normalized


def dig(body: Any, keys: Sequence[str]) -> Any:
    """Follow ``keys`` through nested dicts, returning None when a key is absent."""
    for key in keys:
        if not isinstance(body, dict):
            return None
        body = body.get(key)
    return body
