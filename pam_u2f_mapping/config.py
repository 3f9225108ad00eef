from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_LOG_LEVEL, DEFAULT_MAPPING_FILE, ENV_LOG_LEVEL, ENV_MAPPING_FILE


@dataclass(frozen=True)
class EditorConfig:
    mapping_file: Path
    log_level: str = DEFAULT_LOG_LEVEL


def get_editor_config() -> EditorConfig:
    mapping_file = os.getenv(ENV_MAPPING_FILE) or DEFAULT_MAPPING_FILE
    log_level = os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    return EditorConfig(mapping_file=Path(mapping_file).expanduser(), log_level=log_level.upper())
