"""Build the per-sample test matrix and execute single cases."""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, TextIO

from .corpus import SampleFile, scan_samples
from .errors import SetupError
from .fixtures import fixture_path_for, load_fixture
from .scenarios import check_audio_packet, check_media_info, check_orientation, check_video_packet
from .session import AsyncDemuxerSession, DemuxerSession
from .settings import HarnessConfig

logger = logging.getLogger(__name__)


class Scenario(enum.Enum):
    MEDIA_INFO = "media_info"
    VIDEO_PACKET = "video_packet"
    AUDIO_PACKET = "audio_packet"
    ORIENTATION = "orientation"

    @property
    def packet_kind(self) -> Optional[str]:
        return {Scenario.VIDEO_PACKET: "video", Scenario.AUDIO_PACKET: "audio"}.get(self)

    @property
    def uses_fixture(self) -> bool:
        return self.packet_kind is None


GENERAL_SCENARIOS = (Scenario.MEDIA_INFO, Scenario.VIDEO_PACKET, Scenario.AUDIO_PACKET)

_DESCRIPTIONS = {
    Scenario.MEDIA_INFO: "should get correct media info for {}",
    Scenario.VIDEO_PACKET: "should get correct video packet for {}",
    Scenario.AUDIO_PACKET: "should get correct audio packet for {}",
    Scenario.ORIENTATION: "should get correct rotation and flip for {}",
}


@dataclass(frozen=True)
class Case:
    scenario: Scenario
    sample: SampleFile
    fixture: Optional[Path] = None

    @property
    def case_id(self) -> str:
        return f"{self.scenario.value}[{self.sample.name}]"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.scenario].format(self.sample.name)

    @property
    def method_name(self) -> str:
        slug = re.sub(r"\W+", "_", self.sample.name).strip("_") or "sample"
        return f"test_{self.scenario.value}__{slug}"


def _cases_for(
    samples: Iterable[SampleFile],
    scenarios: Iterable[Scenario],
    fixtures_root: Path,
    strict: bool,
) -> List[Case]:
    cases: List[Case] = []
    missing: List[str] = []
    for sample in samples:
        for scenario in scenarios:
            fixture = fixture_path_for(sample, fixtures_root) if scenario.uses_fixture else None
            if strict and fixture is not None and not fixture.is_file():
                missing.append(f"{sample.name} -> {fixture}")
            cases.append(Case(scenario, sample, fixture))
    if missing:
        raise SetupError("Samples without fixtures: " + ", ".join(sorted(set(missing))))
    return cases


def build_matrix(config: Optional[HarnessConfig] = None) -> List[Case]:
    """Three cases per general sample, one per orientation sample."""
    config = config or HarnessConfig()
    general = scan_samples(config.samples_root)
    orientation = scan_samples(config.orientation_samples_root)
    cases = _cases_for(general, GENERAL_SCENARIOS, config.fixtures_root, config.strict_fixtures)
    cases += _cases_for(
        orientation, (Scenario.ORIENTATION,), config.orientation_fixtures_root, config.strict_fixtures
    )
    logger.info(
        "Matrix: %d cases (%d samples, %d orientation samples)", len(cases), len(general), len(orientation)
    )
    return cases


def check_result(case: Case, result: Any, out: Optional[TextIO] = None) -> None:
    scenario = case.scenario
    if scenario is Scenario.VIDEO_PACKET:
        check_video_packet(result)
    elif scenario is Scenario.AUDIO_PACKET:
        check_audio_packet(result)
    elif scenario is Scenario.MEDIA_INFO:
        check_media_info(result, load_fixture(case.fixture), out, case.case_id)
    else:
        check_orientation(result, load_fixture(case.fixture), out, case.case_id)


def run_case(session: DemuxerSession, case: Case, out: Optional[TextIO] = None) -> None:
    """Open, load, read once, check. Returns silently on success."""
    session.open(case.sample)
    if case.scenario.packet_kind:
        result = session.seek_media_packet(case.scenario.packet_kind)
    else:
        result = session.get_media_info()
    check_result(case, result, out)


async def arun_case(session: AsyncDemuxerSession, case: Case, out: Optional[TextIO] = None) -> None:
    await session.open(case.sample)
    if case.scenario.packet_kind:
        result = await session.seek_media_packet(case.scenario.packet_kind)
    else:
        result = await session.get_media_info()
    check_result(case, result, out)
