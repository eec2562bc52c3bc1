from dataclasses import dataclass
from pathlib import Path


@dataclass
class Settings:
    database_path: Path = Path("vidsift.db")
    frame_interval_ms: int = 1000
    # Frames past this point are never sampled, whatever the video length.
    max_duration_ms: int = 10_000
    # Hardware decoders refuse sessions beyond roughly this many.
    max_concurrent_sessions: int = 16
    similarity_threshold: float = 0.95

    def __post_init__(self) -> None:
        if self.frame_interval_ms <= 0:
            raise ValueError(f"frame_interval_ms must be positive, got {self.frame_interval_ms}")
        if self.max_duration_ms <= 0:
            raise ValueError(f"max_duration_ms must be positive, got {self.max_duration_ms}")
        if self.max_concurrent_sessions <= 0:
            raise ValueError(
                f"max_concurrent_sessions must be positive, got {self.max_concurrent_sessions}"
            )
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be within [0, 1], got {self.similarity_threshold}"
            )
