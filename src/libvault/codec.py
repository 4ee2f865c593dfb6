"""
Codecs used to encode request bodies and decode response bodies.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Union

from .exceptions import CodecError


class Codec(ABC):
    """Base class for payload codecs."""

    @abstractmethod
    def encode(self, value: Any) -> str:
        """Encode a structured value, raising CodecError on failure."""
        pass

    @abstractmethod
    def decode(self, payload: Union[bytes, str]) -> Any:
        """Decode a payload, raising CodecError on failure."""
        pass


class JSONCodec(Codec):
    """JSON codec backed by the standard library."""

    def __init__(self, **dump_options):
        self.dump_options = {"separators": (",", ":"), **dump_options}

    def encode(self, value: Any) -> str:
        try:
            return json.dumps(value, **self.dump_options)
        except (TypeError, ValueError) as e:
            raise CodecError(["JSON encode error", str(e)])

    def decode(self, payload: Union[bytes, str]) -> Any:
        try:
            return json.loads(payload)
        except (TypeError, ValueError) as e:
            raise CodecError(["JSON decode error", str(e)])
