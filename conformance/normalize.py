"""Canonical, comparison-only views of demuxer output.

Demuxer results carry fields that depend on where the sample was loaded from
(``filename`` is a temp path, ``url`` is a blob URL) and binary fields whose
shape depends on how they crossed the page boundary. Everything here is pure:
inputs are never mutated and the output is safe to normalize again.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping

VOLATILE_FIELDS = ("filename", "url")
ORIENTATION_FIELDS = ("id", "rotation", "flip")


def to_byte_list(value: Any) -> List[int]:
    """Materialize a binary-ish value as a plain list of byte values.

    Accepts falsy values (absent), bytes-like objects, lists/tuples of
    ints, and objects keyed by ``"0"``, ``"1"``... which is what a typed
    array turns into when it goes through ``JSON.stringify``.
    """
    # same as `extradata || []`: any falsy value reads as absent
    if not value:
        return []
    if isinstance(value, (bytes, bytearray, memoryview)):
        return list(bytes(value))
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, Mapping):
        try:
            keys = sorted(value, key=int)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Binary object has non-index keys: {sorted(value)[:5]}") from exc
        return [value[key] for key in keys]
    raise TypeError(f"Cannot read {type(value).__name__} as a byte sequence")


def _normalize_stream(stream: Any) -> Any:
    if not isinstance(stream, Mapping):
        return copy.deepcopy(stream)
    out = {key: copy.deepcopy(val) for key, val in stream.items()}
    out["extradata"] = to_byte_list(stream.get("extradata"))
    return out


def normalize_media_info(info: Mapping[str, Any]) -> Dict[str, Any]:
    normalized = {
        key: copy.deepcopy(val) for key, val in info.items() if key not in VOLATILE_FIELDS
    }
    normalized["streams"] = [_normalize_stream(s) for s in info.get("streams") or []]
    return normalized


def project_orientation(info: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only ``id``, ``rotation`` and ``flip`` per stream, in stream order."""
    return {
        "streams": [
            {field: stream.get(field) for field in ORIENTATION_FIELDS}
            if isinstance(stream, Mapping)
            else copy.deepcopy(stream)
            for stream in info.get("streams") or []
        ]
    }
