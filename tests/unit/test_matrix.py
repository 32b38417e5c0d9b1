import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from conformance.errors import DriverError, FixtureError, MediaInfoMismatch, PacketCheckError, SetupError
from conformance.matrix import GENERAL_SCENARIOS, Case, Scenario, build_matrix, run_case
from conformance.session import DemuxerSession
from conformance.settings import HarnessConfig
from tests.unit.fakes import CLIP_INFO, FakeDemuxer, FakePage


def make_corpus(root: Path, samples=("clip.mp4", "audio_only.webm"), orientation=("rotated_90.mp4",)) -> HarnessConfig:
    samples_root = root / "samples"
    fixtures_root = root / "fixtures" / "mediainfo"
    (samples_root / "orientation").mkdir(parents=True)
    (fixtures_root / "orientation").mkdir(parents=True)
    for name in samples:
        (samples_root / name).write_bytes(b"\x00")
    for name in orientation:
        (samples_root / "orientation" / name).write_bytes(b"\x00")
    return HarnessConfig(samples_root=samples_root, fixtures_root=fixtures_root)


def write_fixture(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


class BuildMatrixTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)

    def test_three_cases_per_sample_and_one_per_orientation_sample(self) -> None:
        config = make_corpus(self.root)
        cases = build_matrix(config)

        self.assertEqual(len(cases), 7)
        general = [c for c in cases if c.scenario in GENERAL_SCENARIOS]
        self.assertEqual(
            sorted((c.sample.name, c.scenario.value) for c in general),
            sorted((n, s.value) for n in ("clip.mp4", "audio_only.webm") for s in GENERAL_SCENARIOS),
        )
        (orientation,) = [c for c in cases if c.scenario is Scenario.ORIENTATION]
        self.assertEqual(orientation.fixture, config.fixtures_root / "orientation" / "rotated_90.json")

    def test_only_comparison_scenarios_carry_fixtures(self) -> None:
        config = make_corpus(self.root, samples=("clip.mp4",), orientation=())
        by_scenario = {c.scenario: c for c in build_matrix(config)}
        self.assertEqual(by_scenario[Scenario.MEDIA_INFO].fixture, config.fixtures_root / "clip.json")
        self.assertIsNone(by_scenario[Scenario.VIDEO_PACKET].fixture)
        self.assertIsNone(by_scenario[Scenario.AUDIO_PACKET].fixture)

    def test_missing_orientation_directory_is_fatal(self) -> None:
        config = make_corpus(self.root)
        (config.samples_root / "orientation" / "rotated_90.mp4").unlink()
        (config.samples_root / "orientation").rmdir()
        with self.assertRaises(SetupError):
            build_matrix(config)

    def test_strict_pairing_rejects_unpaired_samples(self) -> None:
        config = make_corpus(self.root, samples=("clip.mp4",), orientation=("rotated_90.mp4",))
        write_fixture(config.fixtures_root / "clip.json", {"streams": []})
        strict = config.model_copy(update={"strict_fixtures": True})
        with self.assertRaisesRegex(SetupError, "rotated_90.mp4"):
            build_matrix(strict)

        write_fixture(config.fixtures_root / "orientation" / "rotated_90.json", {"streams": []})
        self.assertEqual(len(build_matrix(strict)), 4)

    def test_case_naming(self) -> None:
        config = make_corpus(self.root, samples=("clip.mp4",), orientation=())
        by_scenario = {c.scenario: c for c in build_matrix(config)}
        case = by_scenario[Scenario.AUDIO_PACKET]
        self.assertEqual(case.case_id, "audio_packet[clip.mp4]")
        self.assertEqual(case.method_name, "test_audio_packet__clip_mp4")
        self.assertEqual(case.description, "should get correct audio packet for clip.mp4")


class RunCaseTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.config = make_corpus(Path(tmp.name), samples=("clip.mp4",), orientation=("rotated_90.mp4",))
        self.cases = {(c.scenario, c.sample.name): c for c in build_matrix(self.config)}

    def session(self, demuxer: FakeDemuxer = None) -> DemuxerSession:
        self.page = FakePage(demuxer)
        return DemuxerSession(self.page, self.config)

    def case(self, scenario: Scenario) -> Case:
        name = "rotated_90.mp4" if scenario is Scenario.ORIENTATION else "clip.mp4"
        return self.cases[(scenario, name)]

    def test_media_info_passes_silently(self) -> None:
        fixture = {k: v for k, v in CLIP_INFO.items() if k not in ("filename", "url")}
        write_fixture(self.case(Scenario.MEDIA_INFO).fixture, fixture)
        out = io.StringIO()
        with redirect_stdout(out):
            run_case(self.session(), self.case(Scenario.MEDIA_INFO))
        self.assertEqual(out.getvalue(), "")

    def test_media_info_mismatch_dumps_both_sides(self) -> None:
        write_fixture(
            self.case(Scenario.MEDIA_INFO).fixture,
            {"streams": [{"id": 0, "codec": "vp9", "rotation": 0, "flip": "none", "extradata": [1, 2, 3]}]},
        )
        out = io.StringIO()
        with self.assertRaises(MediaInfoMismatch):
            run_case(self.session(), self.case(Scenario.MEDIA_INFO), out)
        self.assertIn("Actual MediaInfo:", out.getvalue())

    def test_missing_fixture_fails_the_case(self) -> None:
        with self.assertRaises(FixtureError):
            run_case(self.session(), self.case(Scenario.MEDIA_INFO))

    def test_video_packet_uses_fixed_seek_parameters(self) -> None:
        demuxer = FakeDemuxer()
        run_case(self.session(demuxer), self.case(Scenario.VIDEO_PACKET))
        self.assertEqual(demuxer.calls[-1], ("seekMediaPacket", "video", 1, 4))

    def test_audio_packet_failure(self) -> None:
        demuxer = FakeDemuxer(packets={"audio": {"size": 0, "timestamp": 1, "data": [], "bufferByteLength": 0}})
        with self.assertRaises(PacketCheckError):
            run_case(self.session(demuxer), self.case(Scenario.AUDIO_PACKET))

    def test_orientation_passes_when_only_other_fields_differ(self) -> None:
        write_fixture(
            self.case(Scenario.ORIENTATION).fixture,
            {"streams": [{"id": 0, "rotation": 0, "flip": "none"}, {"id": 1, "rotation": 0, "flip": "none"}]},
        )
        run_case(self.session(), self.case(Scenario.ORIENTATION))

    def test_stream_without_id_is_a_dumped_mismatch(self) -> None:
        write_fixture(self.case(Scenario.MEDIA_INFO).fixture, {"streams": [{"id": 0, "codec": "h264"}]})
        demuxer = FakeDemuxer(media_info={"url": "blob:x", "streams": [{"codec": "h264"}]})
        out = io.StringIO()
        with self.assertRaises(MediaInfoMismatch) as ctx:
            run_case(self.session(demuxer), self.case(Scenario.MEDIA_INFO), out)
        self.assertEqual(ctx.exception.differences, ["$.streams[0].id: missing from actual"])
        self.assertIn("Actual MediaInfo:", out.getvalue())
        self.assertIn("Expected MediaInfo:", out.getvalue())

    def test_fractional_rotation_is_a_dumped_mismatch(self) -> None:
        write_fixture(
            self.case(Scenario.ORIENTATION).fixture,
            {"streams": [{"id": 0, "rotation": 90, "flip": "none"}]},
        )
        demuxer = FakeDemuxer(media_info={"streams": [{"id": 0, "rotation": -90.5, "flip": "none"}]})
        out = io.StringIO()
        with self.assertRaises(MediaInfoMismatch):
            run_case(self.session(demuxer), self.case(Scenario.ORIENTATION), out)
        self.assertIn("Actual Orientation:", out.getvalue())
        self.assertIn("Expected Orientation:", out.getvalue())
        self.assertIn("-90.5", out.getvalue())

    def test_dump_names_the_case(self) -> None:
        write_fixture(self.case(Scenario.MEDIA_INFO).fixture, {"streams": []})
        out = io.StringIO()
        with self.assertRaises(MediaInfoMismatch):
            run_case(self.session(), self.case(Scenario.MEDIA_INFO), out)
        self.assertTrue(out.getvalue().startswith("--- media_info[clip.mp4] ---\n"))

    def test_load_rejection_fails_with_message(self) -> None:
        demuxer = FakeDemuxer(load_error="Error: unsupported container")
        with self.assertRaisesRegex(DriverError, "unsupported container"):
            run_case(self.session(demuxer), self.case(Scenario.MEDIA_INFO))
        self.assertEqual(demuxer.calls, [("load", str(self.case(Scenario.MEDIA_INFO).sample.path))])


if __name__ == "__main__":
    unittest.main()
