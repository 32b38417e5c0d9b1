"""Conformance harness for a browser-hosted media demuxer."""

from .compare import assert_media_info_equal, assert_orientation_equal, diff
from .corpus import SampleFile, scan_samples
from .errors import (
    ConformanceError,
    DriverError,
    FixtureError,
    MediaInfoMismatch,
    PacketCheckError,
    SetupError,
)
from .fixtures import fixture_name_for, fixture_path_for, load_fixture
from .matrix import Case, Scenario, build_matrix, run_case
from .normalize import normalize_media_info, project_orientation, to_byte_list
from .session import AsyncDemuxerSession, DemuxerSession
from .settings import HarnessConfig

__all__ = [
    "AsyncDemuxerSession",
    "Case",
    "ConformanceError",
    "DemuxerSession",
    "DriverError",
    "FixtureError",
    "HarnessConfig",
    "MediaInfoMismatch",
    "PacketCheckError",
    "SampleFile",
    "Scenario",
    "SetupError",
    "assert_media_info_equal",
    "assert_orientation_equal",
    "build_matrix",
    "diff",
    "fixture_name_for",
    "fixture_path_for",
    "load_fixture",
    "normalize_media_info",
    "project_orientation",
    "run_case",
    "scan_samples",
    "to_byte_list",
]
