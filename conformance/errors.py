"""Error taxonomy for the conformance harness."""

from __future__ import annotations

from typing import Any, List, Optional


class ConformanceError(RuntimeError):
    """Base class for harness failures that are not assertion mismatches."""


class SetupError(ConformanceError):
    """Corpus or fixture layout is unusable; aborts matrix generation."""


class DriverError(ConformanceError):
    """The page, the demuxer binding or a demuxer call failed for one case."""


class FixtureError(ConformanceError):
    """Expected-result JSON for one sample is missing or malformed."""


class MediaInfoMismatch(AssertionError):
    """Raised when normalized actual and expected structures differ."""

    def __init__(self, label: str, actual: Any, expected: Any, differences: List[str]) -> None:
        self.label = label
        self.actual = actual
        self.expected = expected
        self.differences = differences
        shown = "; ".join(differences[:10])
        if len(differences) > 10:
            shown += f"; ... ({len(differences) - 10} more)"
        super().__init__(f"{label} mismatch: {shown}")


class PacketCheckError(AssertionError):
    def __init__(self, kind: str, problems: List[str], packet: Optional[dict] = None) -> None:
        self.kind = kind
        self.problems = problems
        self.packet = packet
        super().__init__(f"{kind} packet check failed: {'; '.join(problems)}")
