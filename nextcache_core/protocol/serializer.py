"""NextCache Serializer - Value Codec.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, TypeVar

from nextcache_core.errors import SerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Serializer(ABC):
    """Abstract codec for cache values.

    Every value shape shares one byte representation so a single backend
    can hold heterogeneous entries.
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Encode value to bytes.

        Args:
            value: Value to encode, never None

        Returns:
            Encoded bytes

        Raises:
            SerializationError: If value is None or not encodable
        """
        pass

    @abstractmethod
    def decode(self, data: bytes, target: Optional[Callable[[Any], T]] = None) -> Any:
        """Decode bytes to value.

        Args:
            data: Encoded bytes
            target: Optional converter applied to the decoded structure

        Returns:
            Decoded value, or target(decoded) when target is given

        Raises:
            SerializationError: If data is malformed
        """
        pass


def _default(value: Any) -> Any:
    """Encode values json does not know natively."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JSONSerializer(Serializer):
    """JSON codec.

    Self-describing text encoding. Dataclasses and objects exposing
    ``to_dict()`` are encoded as objects; decoding yields plain
    dicts/lists unless a target converter is supplied.

    Example:
        codec = JSONSerializer()
        data = codec.encode({"x": 1})
        codec.decode(data)  # {"x": 1}
        codec.decode(data, Point.from_dict)
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    @property
    def format_name(self) -> str:
        return "json"

    def encode(self, value: Any) -> bytes:
        if value is None:
            raise SerializationError("cannot encode an absent value")
        try:
            return json.dumps(value, default=_default, separators=(",", ":")).encode(self.encoding)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"cannot encode {type(value).__name__}: {e}") from e

    def decode(self, data: bytes, target: Optional[Callable[[Any], T]] = None) -> Any:
        try:
            value = json.loads(data.decode(self.encoding))
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(f"malformed stored value: {e}") from e

        if target is None:
            return value

        try:
            return target(value)
        except (TypeError, ValueError, KeyError) as e:
            raise SerializationError(f"stored value does not fit target: {e}") from e


_default_serializer = JSONSerializer()


def get_serializer() -> Serializer:
    """Get the shared default codec.

    Returns:
        Serializer instance
    """
    return _default_serializer


__all__ = [
    "Serializer",
    "JSONSerializer",
    "get_serializer",
]
