import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from conformance.errors import SetupError
from conformance.server import create_app, render_index
from conformance.settings import HarnessConfig


class ServerTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dist = Path(tmp.name)
        (self.dist / "demuxer.js").write_text("window.demuxer = {};", encoding="utf-8")

    def test_index_has_file_input_and_bundle(self) -> None:
        client = TestClient(create_app(HarnessConfig(demuxer_dist=self.dist)))
        response = client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn('id="example-get-media-info-file"', response.text)
        self.assertIn('src="/demuxer/demuxer.js"', response.text)
        self.assertNotIn("__INPUT_ID__", response.text)

    def test_serves_bundle_and_health(self) -> None:
        client = TestClient(create_app(HarnessConfig(demuxer_dist=self.dist)))
        self.assertEqual(client.get("/demuxer/demuxer.js").text, "window.demuxer = {};")
        self.assertEqual(client.get("/health").json(), {"ok": True, "demuxer": True})

    def test_missing_bundle_is_reported(self) -> None:
        client = TestClient(create_app(HarnessConfig(demuxer_dist=self.dist / "missing")))
        self.assertEqual(client.get("/health").json(), {"ok": True, "demuxer": False})
        self.assertEqual(client.get("/demuxer/demuxer.js").status_code, 404)

    def test_custom_binding_name(self) -> None:
        html = render_index(HarnessConfig(demuxer_global="mp4Demuxer", input_selector="#pick"))
        self.assertIn("const name = 'mp4Demuxer';", html)
        self.assertIn('id="pick"', html)

    def test_selector_must_be_an_id(self) -> None:
        with self.assertRaises(SetupError):
            render_index(HarnessConfig(input_selector="input[type=file]"))


if __name__ == "__main__":
    unittest.main()
