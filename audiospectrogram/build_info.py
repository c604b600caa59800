"""Build metadata, fixed once at import time."""
from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import metadata

DISTRIBUTION = "audiospectrogram"


@dataclass(frozen=True)
class BuildInfo:
    version: str
    commit: str = ""
    date: str = ""
    built_by: str = ""

    def describe(self) -> str:
        parts = [self.version]
        if self.commit:
            parts.append(f"commit {self.commit}")
        if self.date:
            parts.append(f"built {self.date}")
        if self.built_by:
            parts.append(f"by {self.built_by}")
        return ", ".join(parts)


def _load() -> BuildInfo:
    try:
        version = metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        version = "0.0.0"
    return BuildInfo(
        version=version,
        commit=os.environ.get("AUDIOSPECTROGRAM_COMMIT", ""),
        date=os.environ.get("AUDIOSPECTROGRAM_DATE", ""),
        built_by=os.environ.get("AUDIOSPECTROGRAM_BUILT_BY", ""),
    )


BUILD_INFO = _load()
