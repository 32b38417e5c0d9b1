"""Sample corpus discovery."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .errors import SetupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleFile:
    path: Path
    name: str


def scan_samples(root: Path) -> List[SampleFile]:
    """Return the regular files directly inside ``root``.

    Order follows directory iteration and is not sorted. Subdirectories
    (such as ``orientation/``) are not descended into.
    """
    root = Path(root)
    if not root.is_dir():
        raise SetupError(f"Sample directory does not exist: {root}")
    try:
        with os.scandir(root) as entries:
            samples = [
                SampleFile(path=Path(entry.path).resolve(), name=entry.name)
                for entry in entries
                if entry.is_file()
            ]
    except OSError as exc:
        raise SetupError(f"Sample directory is unreadable: {root}: {exc}") from exc
    logger.debug("Found %d samples in %s", len(samples), root)
    return samples
