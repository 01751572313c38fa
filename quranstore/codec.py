# quranstore/codec.py
"""
Turns records into opaque blobs for the cache store and back again.

The blobs are pydantic JSON (wire aliases included), which keeps every nested
audio/translation/media field intact across a round-trip. The format is only
meant to be read back by this package.
"""
from functools import lru_cache
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError


class DecodeError(Exception):
    """Raised when a cached blob is missing, corrupt or of the wrong shape"""


@lru_cache(maxsize=None)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


def encode(value: Any, shape: Any) -> bytes:
    """Serialize ``value`` (a model or a list of models) as ``shape``."""
    return _adapter(shape).dump_json(value, by_alias=True)


def decode(blob: Optional[bytes], shape: Any) -> Any:
    """Validate ``blob`` back into ``shape``, raising DecodeError on any mismatch."""
    if not blob:
        raise DecodeError("empty blob")
    try:
        return _adapter(shape).validate_json(blob)
    except ValidationError as e:
        raise DecodeError(f"blob does not match {shape}: {e.error_count()} error(s)") from e
