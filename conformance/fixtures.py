"""Expected-result fixtures paired with samples by base name."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError

from .corpus import SampleFile
from .errors import FixtureError
from .models import MediaInfo

logger = logging.getLogger(__name__)

_TRAILING_EXT = re.compile(r"\.[^.]+$")


def fixture_name_for(sample_name: str) -> str:
    """``clip.mp4`` -> ``clip.json``; a name with no extension gets ``.json`` appended."""
    if _TRAILING_EXT.search(sample_name):
        return _TRAILING_EXT.sub(".json", sample_name)
    return sample_name + ".json"


def fixture_path_for(sample: Union[SampleFile, str], fixtures_root: Path) -> Path:
    name = sample.name if isinstance(sample, SampleFile) else sample
    return Path(fixtures_root) / fixture_name_for(name)


def load_fixture(path: Path) -> Dict[str, Any]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FixtureError(f"Fixture not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise FixtureError(f"Fixture unreadable: {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FixtureError(f"Fixture is not valid JSON: {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise FixtureError(f"Fixture must hold a JSON object, got {type(data).__name__}: {path}")
    try:
        MediaInfo.model_validate(data)
    except ValidationError as exc:
        raise FixtureError(f"Fixture does not describe media info: {path}: {exc}") from exc
    logger.debug("Loaded fixture %s", path)
    return data
