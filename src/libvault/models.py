"""
Data models for libvault.
"""

from enum import Enum
from typing import List, NamedTuple, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

Header = Tuple[str, str]


class HTTPMethod(str, Enum):
    """HTTP verbs accepted by the request pipeline."""
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    PATCH = "PATCH"
    HEAD = "HEAD"
    DELETE = "DELETE"

    @classmethod
    def coerce(cls, method: Union[str, "HTTPMethod"]) -> "HTTPMethod":
        """Accept a member or a verb name in any case."""
        if isinstance(method, cls):
            return method
        return cls(str(method).upper())


class TransportResponse(BaseModel):
    """Raw response handed back by a transport."""
    model_config = ConfigDict(frozen=True)

    status: int = Field(..., description="HTTP status code")
    headers: List[Header] = Field(default_factory=list, description="Response headers")
    body: Union[bytes, str] = Field(b"", description="Undecoded response body")


class LoginResult(NamedTuple):
    """Token and lease duration produced by an auth adapter."""
    token: str
    ttl: int
