"""Protocol module - Value codecs."""

from nextcache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    get_serializer,
)

__all__ = [
    "Serializer",
    "JSONSerializer",
    "get_serializer",
]
