"""
libvault

Configurable Python client for HashiCorp Vault. Authenticates against
interchangeable login backends and reads, writes, lists and deletes secrets
across interchangeable secret engines behind one uniform API.
"""

from .client import Vault
from .auth import (
    AuthAdapter,
    LoginAdapter,
    Credentials,
    AppRoleAuth,
    UserPassAuth,
    LDAPAuth,
    JWTAuth,
    AzureAuth,
    GoogleCloudAuth,
    GitHubAuth,
    TokenAuth,
    GenericAuth,
)
from .codec import Codec, JSONCodec
from .config import HTTPOptions
from .engines import EngineAdapter, Generic, KVV1, KVV2
from .exceptions import (
    VaultError,
    ConfigurationError,
    ValidationError,
    HTTPAdapterError,
    CodecError,
    VaultResponseError,
    NotFoundError,
    UnexpectedResponseError,
    UnknownResponseError,
    TransportError,
)
from .models import HTTPMethod, LoginResult, TransportResponse
from .transport import Transport, HttpxTransport

__version__ = "0.3.0"

__all__ = [
    "Vault",
    "AuthAdapter",
    "LoginAdapter",
    "Credentials",
    "AppRoleAuth",
    "UserPassAuth",
    "LDAPAuth",
    "JWTAuth",
    "AzureAuth",
    "GoogleCloudAuth",
    "GitHubAuth",
    "TokenAuth",
    "GenericAuth",
    "Codec",
    "JSONCodec",
    "HTTPOptions",
    "EngineAdapter",
    "Generic",
    "KVV1",
    "KVV2",
    "VaultError",
    "ConfigurationError",
    "ValidationError",
    "HTTPAdapterError",
    "CodecError",
    "VaultResponseError",
    "NotFoundError",
    "UnexpectedResponseError",
    "UnknownResponseError",
    "TransportError",
    "HTTPMethod",
    "LoginResult",
    "TransportResponse",
    "Transport",
    "HttpxTransport",
]
