"""Deep structural comparison with diagnostic dumps."""

from __future__ import annotations

import json
import math
import sys
from typing import Any, List, Mapping, Optional, TextIO

from .errors import MediaInfoMismatch
from .normalize import normalize_media_info, project_orientation


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _same_scalar(actual: Any, expected: Any) -> bool:
    # true/false never equal 1/0 on the JavaScript side
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    if isinstance(actual, float) and isinstance(expected, float):
        if math.isnan(actual) and math.isnan(expected):
            return True
    return actual == expected


def _walk(actual: Any, expected: Any, path: str, out: List[str]) -> None:
    if isinstance(actual, Mapping) and isinstance(expected, Mapping):
        for key in expected:
            if key not in actual:
                out.append(f"{path}.{key}: missing from actual")
        for key in actual:
            if key not in expected:
                out.append(f"{path}.{key}: not expected (actual {actual[key]!r})")
        for key in expected:
            if key in actual:
                _walk(actual[key], expected[key], f"{path}.{key}", out)
        return
    if _is_sequence(actual) and _is_sequence(expected):
        if len(actual) != len(expected):
            out.append(f"{path}: length {len(actual)} != expected {len(expected)}")
        for index, (a, e) in enumerate(zip(actual, expected)):
            _walk(a, e, f"{path}[{index}]", out)
        return
    if not _same_scalar(actual, expected):
        out.append(f"{path}: {actual!r} != expected {expected!r}")


def diff(actual: Any, expected: Any) -> List[str]:
    """List every location where ``actual`` and ``expected`` differ.

    Mappings must have the same keys; sequences are compared element-wise and
    in order. An empty list means the structures are equal.
    """
    out: List[str] = []
    _walk(actual, expected, "$", out)
    return out


def dump_pair(
    label: str, actual: Any, expected: Any, out: Optional[TextIO] = None, case_id: Optional[str] = None
) -> None:
    stream = out if out is not None else sys.stdout
    if case_id:
        print(f"--- {case_id} ---", file=stream)
    print(f"Actual {label}:", json.dumps(actual, indent=2, ensure_ascii=False), file=stream)
    print(f"Expected {label}:", json.dumps(expected, indent=2, ensure_ascii=False), file=stream)


def _assert_equal(
    label: str, actual: Any, expected: Any, out: Optional[TextIO], case_id: Optional[str]
) -> None:
    differences = diff(actual, expected)
    if not differences:
        return
    dump_pair(label, actual, expected, out, case_id)
    raise MediaInfoMismatch(label, actual, expected, differences)


def assert_media_info_equal(
    actual: Mapping[str, Any], expected: Mapping[str, Any], out: Optional[TextIO] = None,
    case_id: Optional[str] = None,
) -> None:
    _assert_equal("MediaInfo", normalize_media_info(actual), normalize_media_info(expected), out, case_id)


def assert_orientation_equal(
    actual: Mapping[str, Any], expected: Mapping[str, Any], out: Optional[TextIO] = None,
    case_id: Optional[str] = None,
) -> None:
    _assert_equal("Orientation", project_orientation(actual), project_orientation(expected), out, case_id)
