from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    log_level: str
    px_per_slot: int
    refresh_ms: int

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / "anesthesia_data.json"

    @property
    def timer_path(self) -> Path:
        return self.data_dir / "anesthesia_timer.json"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


def load_settings() -> Settings:
    """Read settings from the environment, after loading a local .env file if present."""
    load_dotenv()
    return Settings(
        data_dir=Path(os.getenv("ANESREC_DATA_DIR") or ".anesrec"),
        log_level=(os.getenv("ANESREC_LOG_LEVEL") or "INFO").upper(),
        px_per_slot=_int_env("ANESREC_PX_PER_SLOT", 40),
        refresh_ms=_int_env("ANESREC_REFRESH_MS", 1000),
    )
