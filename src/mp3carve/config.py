from dataclasses import dataclass
from typing import Optional, Tuple

from .deobfs import PHASES
from .extract import THRESHOLD

@dataclass(frozen=True)
class CarveConfig:
    threshold: int = THRESHOLD
    phases: Tuple[int, ...] = PHASES
    outdir: Optional[str] = None
    jobs: int = 1
    dry_run: bool = False

    def validate(self) -> "CarveConfig":
        if self.threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {self.threshold}")
        if not self.phases:
            raise ValueError("at least one phase is required")
        for p in self.phases:
            if p not in PHASES:
                raise ValueError(f"phase must be 0..3, got {p}")
        if self.jobs < 1:
            raise ValueError(f"jobs must be >= 1, got {self.jobs}")
        return self

def parse_phases(text: str) -> Tuple[int, ...]:
    """'0,2' -> (0, 2); duplicates dropped, order kept."""
    out = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        p = int(part)
        if p not in PHASES:
            raise ValueError(f"phase must be 0..3, got {p}")
        if p not in out:
            out.append(p)
    if not out:
        raise ValueError("at least one phase is required")
    return tuple(out)
