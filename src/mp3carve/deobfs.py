import numpy as np

PHASES = (0, 1, 2, 3)
PERIOD = 4

def deobfuscate(buffer: bytes, phase: int) -> bytes:
    """Undo the period-4 byte swap for one phase.

    Every byte at an index i with i % 4 == phase (and i < len - 1) is
    swapped with its right neighbour. The swapped pairs never overlap,
    so the pass is its own inverse.
    """
    if phase not in PHASES:
        raise ValueError(f"phase must be 0..3, got {phase}")
    if len(buffer) < 2:
        return bytes(buffer)
    arr = np.frombuffer(bytes(buffer), dtype=np.uint8).copy()
    left = np.arange(phase, arr.size - 1, PERIOD)
    arr[left], arr[left + 1] = arr[left + 1], arr[left]
    return arr.tobytes()

def obfuscate(buffer: bytes, phase: int) -> bytes:
    return deobfuscate(buffer, phase)
