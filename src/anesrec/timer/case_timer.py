from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def format_hms(seconds: float) -> str:
    total = max(0, int(seconds))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


@dataclass
class CaseTimer:
    """Elapsed case time. Keeps counting across reloads while running."""
    start_time: Optional[float] = None   # epoch seconds, shifted back by prior elapsed time
    elapsed: float = 0.0
    running: bool = False

    def start(self, now: Optional[float] = None) -> bool:
        if self.running:
            return False
        now = time.time() if now is None else now
        self.start_time = now - self.elapsed
        self.running = True
        return True

    def stop(self, now: Optional[float] = None) -> bool:
        if not self.running:
            return False
        self.elapsed = self.elapsed_seconds(now)
        self.running = False
        return True

    def elapsed_seconds(self, now: Optional[float] = None) -> float:
        if not self.running or self.start_time is None:
            return self.elapsed
        now = time.time() if now is None else now
        return max(0.0, now - self.start_time)

    def display(self, now: Optional[float] = None) -> str:
        return format_hms(self.elapsed_seconds(now))


def save_timer(path: Path, timer: CaseTimer) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(timer)), encoding="utf-8")


def load_timer(path: Path) -> CaseTimer:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return CaseTimer(
            start_time=float(data["start_time"]) if data.get("start_time") is not None else None,
            elapsed=float(data.get("elapsed") or 0.0),
            running=bool(data.get("running")),
        )
    except FileNotFoundError:
        return CaseTimer()
    except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
        logger.warning("Timer state unreadable, starting at zero: %s", e)
        return CaseTimer()
