"""
Shared fixtures and test doubles for libvault tests.
"""

import json
from typing import Any, List, NamedTuple

import pytest

from libvault import (
    AuthAdapter,
    EngineAdapter,
    JSONCodec,
    LoginResult,
    Transport,
    TransportError,
    TransportResponse,
    Vault,
    VaultResponseError,
)

HOST = "http://localhost"


class Call(NamedTuple):
    method: str
    url: str
    body: Any
    headers: List
    options: Any

    @property
    def json(self):
        return json.loads(self.body)


class RecordingTransport(Transport):
    """Records every request and replays queued responses (204 when empty)."""

    def __init__(self, *responses, error=None):
        self.calls: List[Call] = []
        self.responses = list(responses)
        self.error = error

    def request(self, method, url, body, headers, options):
        self.calls.append(Call(method, url, body, headers, options))
        if self.error is not None:
            raise TransportError(self.error)
        if self.responses:
            return self.responses.pop(0)
        return TransportResponse(status=204, body=b"")

    def reply(self, payload, status=200):
        self.responses.append(json_response(payload, status))
        return self


class FakeAuth(AuthAdapter):
    def login(self, vault, params):
        if params.get("username") == "good_credentials":
            return LoginResult("token", 500)
        raise VaultResponseError(["an error message"])


class FakeEngine(EngineAdapter):
    """Engine that records calls and returns canned results."""

    def __init__(self, result=None):
        self.calls = []
        self.result = {} if result is None else result

    def read(self, vault, path, **options):
        self.calls.append(("read", path, options))
        return self.result

    def write(self, vault, path, value, **options):
        self.calls.append(("write", path, value, options))
        return self.result

    def list(self, vault, path, **options):
        self.calls.append(("list", path, options))
        return self.result

    def delete(self, vault, path, **options):
        self.calls.append(("delete", path, options))
        return self.result


def json_response(payload, status=200) -> TransportResponse:
    return TransportResponse(status=status, body=json.dumps(payload).encode())


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def vault(transport):
    return Vault(host=HOST, transport=transport, codec=JSONCodec(), token="token")


@pytest.fixture
def anonymous_vault(transport):
    return Vault(host=HOST, transport=transport, codec=JSONCodec())
