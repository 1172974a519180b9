from __future__ import annotations

from dataclasses import dataclass

SMALL_FILE_TOKEN_LENGTH = 12 * 1024
WASTE_THRESHOLD = 60.0


@dataclass(frozen=True)
class OptimizerConfig:
    src_dir: str = "."
    dest_dir: str = "dist"
    small_file_token_length: int = SMALL_FILE_TOKEN_LENGTH
    waste_threshold: float = WASTE_THRESHOLD  # percent of unused bytes
    max_workers: int = 4
    transform_timeout: float | None = 30.0  # seconds per stylesheet, None to wait forever
