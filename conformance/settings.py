# conformance/settings.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

REPO_ROOT = Path(__file__).resolve().parents[1]

ENV_PREFIX = "CONFORMANCE_"


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


class HarnessConfig(BaseModel):
    """Where the corpus lives and how the harness page is reached."""

    model_config = ConfigDict(frozen=True)

    page_url: str = "http://localhost:5173"
    input_selector: str = "#example-get-media-info-file"
    demuxer_global: str = "demuxer"
    # how long to wait for the demuxer binding to appear on the page (ms)
    binding_timeout_ms: int = 10_000
    # default bound for every page call in a case, load() included (ms)
    case_timeout_ms: int = 30_000

    samples_root: Path = REPO_ROOT / "samples"
    fixtures_root: Path = REPO_ROOT / "fixtures" / "mediainfo"
    orientation_dir: str = "orientation"
    strict_fixtures: bool = False

    headless: bool = True

    server_host: str = "127.0.0.1"
    server_port: int = 5173
    demuxer_dist: Path = REPO_ROOT / "demuxer"
    demuxer_entry: str = "demuxer.js"

    @property
    def orientation_samples_root(self) -> Path:
        return self.samples_root / self.orientation_dir

    @property
    def orientation_fixtures_root(self) -> Path:
        return self.fixtures_root / self.orientation_dir

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "HarnessConfig":
        """Build a config from ``CONFORMANCE_*`` variables; keyword overrides win."""
        env = os.environ if environ is None else environ
        parsers: Dict[str, Callable[[str], object]] = {
            "page_url": str,
            "input_selector": str,
            "demuxer_global": str,
            "binding_timeout_ms": int,
            "case_timeout_ms": int,
            "samples_root": Path,
            "fixtures_root": Path,
            "orientation_dir": str,
            "strict_fixtures": _to_bool,
            "headless": _to_bool,
            "server_host": str,
            "server_port": int,
            "demuxer_dist": Path,
            "demuxer_entry": str,
        }
        values: Dict[str, object] = {}
        for field, parse in parsers.items():
            raw = env.get(ENV_PREFIX + field.upper())
            if raw is not None:
                values[field] = parse(raw)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
