from dataclasses import dataclass
from typing import List

import numpy as np

from .mp3stream import HEADER_LEN, parse_header_bytes

THRESHOLD = 50 * 1024

@dataclass
class ExtractedRun:
    data: bytes
    offset: int
    frames: int = 0

    def __iter__(self):
        return iter((self.data, self.offset))

    def __len__(self):
        return len(self.data)

def _sync_candidates(view) -> np.ndarray:
    """Positions whose first two bytes can open an MPEG-1 Layer III header."""
    if len(view) < HEADER_LEN:
        return np.empty(0, dtype=np.int64)
    a = np.frombuffer(view, dtype=np.uint8)
    # 0xFF then 111 11 01 x: sync tail, MPEG-1, Layer III, any protection bit
    hit = (a[:-1] == 0xFF) & ((a[1:] & 0xFE) == 0xFA)
    return np.flatnonzero(hit)

class RunExtractor:
    """Single-pass synchronizer that stitches back-to-back frames into runs.

    The scan keeps one cursor over a borrowed view of the buffer. A header
    that fails validation moves the cursor one byte forward; a valid one
    appends the whole frame to the current run and jumps past it. A run is
    closed by the first rejected header after it, or by the end of the
    scan, and is kept only if it is longer than ``threshold`` bytes.
    """

    def __init__(self, data, threshold: int = THRESHOLD):
        self.view = memoryview(data).cast("B")
        self.total = len(self.view)
        self.threshold = threshold
        self.cursor = 0
        self.run = bytearray()
        self.run_start = 0
        self.run_frames = 0
        self.in_frame = False
        self.runs: List[ExtractedRun] = []
        self._candidates = _sync_candidates(self.view)
        self._scan()

    def _next_candidate(self, pos: int) -> int:
        # every position skipped here would fail parse_header anyway
        k = int(np.searchsorted(self._candidates, pos))
        if k < self._candidates.size:
            return int(self._candidates[k])
        return self.total

    def _flush(self):
        if len(self.run) > self.threshold:
            self.runs.append(ExtractedRun(bytes(self.run), self.run_start, self.run_frames))
        self.run.clear()
        self.run_frames = 0

    def _step(self) -> bool:
        if not self.in_frame:
            self._flush()
        self.in_frame = False

        if self.cursor + HEADER_LEN > self.total:
            return False
        h = parse_header_bytes(self.view, self.cursor)
        if h is None:
            self.cursor = self._next_candidate(self.cursor + 1)
            return True

        size = h.frame_length
        if self.cursor + size > self.total:
            # truncated final frame
            return False
        if not self.run:
            self.run_start = self.cursor
        self.run += self.view[self.cursor:self.cursor + size]
        self.run_frames += 1
        self.in_frame = True
        self.cursor += size
        return True

    def _scan(self):
        while self._step():
            pass
        self._flush()

def extract_runs(data, threshold: int = THRESHOLD) -> List[ExtractedRun]:
    return RunExtractor(data, threshold).runs
