"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ReportContext:
    """Run parameters rendered into the report summary."""

    environment: str
    location: str
    mode: str
    log_path: Path | None = None
