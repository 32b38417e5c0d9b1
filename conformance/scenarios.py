"""Oracles applied to one demuxer result per scenario."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, TextIO

from pydantic import ValidationError

from .compare import assert_media_info_equal, assert_orientation_equal
from .errors import PacketCheckError
from .models import Packet


def _positive(value: Optional[float]) -> bool:
    return value is not None and value > 0


def _read_packet(kind: str, raw: Any) -> Packet:
    if raw is None:
        raise PacketCheckError(kind, ["no packet returned"])
    try:
        return Packet.model_validate(raw)
    except ValidationError as exc:
        raise PacketCheckError(kind, [f"malformed packet: {exc}"], raw) from exc


def _base_problems(packet: Packet) -> List[str]:
    problems = []
    if not _positive(packet.size):
        problems.append(f"size must be > 0, got {packet.size!r}")
    if packet.data is None:
        problems.append("data is undefined")
    if packet.buffer_byte_length is None:
        problems.append("data has no backing buffer")
    if not _positive(packet.timestamp):
        problems.append(f"timestamp must be > 0, got {packet.timestamp!r}")
    return problems


def check_video_packet(raw: Any) -> Packet:
    packet = _read_packet("video", raw)
    problems = _base_problems(packet)
    if not _positive(packet.duration):
        problems.append(f"duration must be > 0, got {packet.duration!r}")
    if problems:
        raise PacketCheckError("video", problems, raw)
    return packet


def check_audio_packet(raw: Any) -> Packet:
    # Audio framing may legitimately report no duration, so it is not checked.
    packet = _read_packet("audio", raw)
    problems = _base_problems(packet)
    if packet.buffer_byte_length is not None and packet.buffer_byte_length <= 0:
        problems.append(f"data buffer must not be empty, got byteLength {packet.buffer_byte_length}")
    if problems:
        raise PacketCheckError("audio", problems, raw)
    return packet


def check_media_info(
    actual: Mapping[str, Any],
    expected: Mapping[str, Any],
    out: Optional[TextIO] = None,
    case_id: Optional[str] = None,
) -> None:
    if actual is None:
        raise AssertionError("getMediaInfo() returned nothing")
    assert_media_info_equal(actual, expected, out, case_id)


def check_orientation(
    actual: Mapping[str, Any],
    expected: Mapping[str, Any],
    out: Optional[TextIO] = None,
    case_id: Optional[str] = None,
) -> None:
    if actual is None:
        raise AssertionError("getMediaInfo() returned nothing")
    assert_orientation_equal(actual, expected, out, case_id)
