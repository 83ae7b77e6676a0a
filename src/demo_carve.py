#!/usr/bin/env python3
"""
Demonstration: hide MP3 frames behind the swap cipher and carve them back.
"""

import logging
import sys
import tempfile
from pathlib import Path

import numpy as np

# Add src to path
BASE_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(BASE_DIR))

from mp3carve.deobfs import obfuscate
from mp3carve.mp3stream import MP3Stream, build_frame
from mp3carve.pipeline import carve_file


def create_container(path: str, phase: int = 2, seed: int = 7):
    """Write noise + two obfuscated streams + noise, return the stream offsets."""
    rng = np.random.default_rng(seed)

    def noise(n):
        a = rng.integers(0, 256, n, dtype=np.uint8)
        a[a == 0xFF] = 0  # keep sync words out of the filler
        return a.tobytes()

    stream_a = b"".join(build_frame(320000, 44100) for _ in range(60))
    stream_b = b"".join(build_frame(128000, 48000, padding=(i % 3 == 0)) for i in range(160))
    parts = [noise(1000), stream_a, noise(4096), stream_b, noise(500)]
    offsets = [1000, 1000 + len(stream_a) + 4096]
    plain = b"".join(parts)
    Path(path).write_bytes(obfuscate(plain, phase))
    return offsets


def demo():
    print("=== MP3 CARVING DEMO ===\n")
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    with tempfile.TemporaryDirectory() as tmpdir:
        container = str(Path(tmpdir) / "container.bin")
        offsets = create_container(container)
        print(f"Container: {Path(container).stat().st_size:,} bytes, streams at {offsets}\n")

        outs = carve_file(container)
        print(f"\nRecovered {len(outs)} stream(s):")
        for out in outs:
            st = MP3Stream(out.read_bytes()).stats()
            print(f"  {out.name}: {st['total_frames']} frames, {st['duration_sec']:.2f}s, "
                  f"{st['padded_frames']} padded")


if __name__ == "__main__":
    demo()
