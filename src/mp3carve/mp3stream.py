from dataclasses import dataclass
from typing import List, Optional
import struct

SYNC_MASK = 0xFFE00000
VERSION_MPEG1 = 0b11
LAYER_III = 0b01
EMPHASIS_RESERVED = 0b10
HEADER_LEN = 4
SAMPLES_PER_FRAME = 1152

BITRATES = {
    0b0001: 32000, 0b0010: 40000, 0b0011: 48000, 0b0100: 56000,
    0b0101: 64000, 0b0110: 80000, 0b0111: 96000, 0b1000: 112000,
    0b1001: 128000, 0b1010: 160000, 0b1011: 192000, 0b1100: 224000,
    0b1101: 256000, 0b1110: 320000
}
# index 2 is 3200, not the 32000 of the MPEG-1 tables; see DESIGN.md
SAMPLERATES = {0b00: 44100, 0b01: 48000, 0b10: 3200}

def bitrate_for(index: int) -> Optional[int]:
    if index == 0b0000 or index == 0b1111:
        return None
    return BITRATES.get(index)

def samplerate_for(index: int) -> Optional[int]:
    if index == 0b11:
        return None
    return SAMPLERATES.get(index)

def frame_length(bitrate: int, samplerate: int, padding: bool) -> int:
    return 144 * bitrate // samplerate + (1 if padding else 0)

@dataclass(frozen=True)
class FrameHeader:
    version: int
    layer: int
    bitrate_idx: int
    samplerate_idx: int
    padding: bool
    emphasis: int
    bitrate: int
    samplerate: int

    @property
    def frame_length(self) -> int:
        return frame_length(self.bitrate, self.samplerate, self.padding)

def parse_header(word: int) -> Optional[FrameHeader]:
    """Decode a 32-bit big-endian header word.

    Returns None unless the word is a syntactically valid MPEG-1 Layer III
    header. Fields are checked in header order: sync, version, layer,
    bit rate, sample rate, emphasis.
    """
    if word & SYNC_MASK != SYNC_MASK:
        return None
    version = (word >> 19) & 0b11
    if version != VERSION_MPEG1:
        return None
    layer = (word >> 17) & 0b11
    if layer != LAYER_III:
        return None
    br_idx = (word >> 12) & 0b1111
    bitrate = bitrate_for(br_idx)
    if bitrate is None:
        return None
    sr_idx = (word >> 10) & 0b11
    samplerate = samplerate_for(sr_idx)
    if samplerate is None:
        return None
    padding = bool((word >> 9) & 0b1)
    emphasis = word & 0b11
    if emphasis == EMPHASIS_RESERVED:
        return None
    return FrameHeader(version, layer, br_idx, sr_idx, padding, emphasis, bitrate, samplerate)

def parse_header_bytes(buf, offset: int = 0) -> Optional[FrameHeader]:
    if offset + HEADER_LEN > len(buf):
        return None
    return parse_header(struct.unpack_from(">I", buf, offset)[0])

def build_header(bitrate: int, samplerate: int, padding: bool = False, emphasis: int = 0) -> bytes:
    """Encode an MPEG-1 Layer III header (no CRC, stereo, no copyright)."""
    br_idx = {v: k for k, v in BITRATES.items()}.get(bitrate)
    sr_idx = {v: k for k, v in SAMPLERATES.items()}.get(samplerate)
    if br_idx is None:
        raise ValueError(f"unsupported bit rate {bitrate}")
    if sr_idx is None:
        raise ValueError(f"unsupported sample rate {samplerate}")
    word = SYNC_MASK | (VERSION_MPEG1 << 19) | (LAYER_III << 17) | (1 << 16)
    word |= (br_idx << 12) | (sr_idx << 10) | ((1 if padding else 0) << 9) | (emphasis & 0b11)
    return struct.pack(">I", word)

def build_frame(bitrate: int, samplerate: int, padding: bool = False, fill: int = 0) -> bytes:
    size = frame_length(bitrate, samplerate, padding)
    return build_header(bitrate, samplerate, padding) + bytes([fill]) * (size - HEADER_LEN)

@dataclass
class Frame:
    offset: int
    size: int
    bitrate: int
    samplerate: int
    padding: bool

class MP3Stream:
    """Frame chain of a recovered stream, followed from the first byte."""

    def __init__(self, data: bytes):
        self.data = data
        self.frames: List[Frame] = []
        self._scan()

    def _scan(self):
        i = 0
        n = len(self.data)
        if n >= 10 and self.data[:3] == b"ID3":
            sz = ((self.data[6] & 0x7F) << 21) | ((self.data[7] & 0x7F) << 14) | ((self.data[8] & 0x7F) << 7) | (self.data[9] & 0x7F)
            i = 10 + sz
        while i + HEADER_LEN <= n:
            h = parse_header_bytes(self.data, i)
            if h is None:
                break
            size = h.frame_length
            if i + size > n:
                break
            self.frames.append(Frame(offset=i, size=size, bitrate=h.bitrate, samplerate=h.samplerate, padding=h.padding))
            i += size
        self.end = i

    @property
    def duration_seconds(self) -> float:
        return sum(SAMPLES_PER_FRAME / fr.samplerate for fr in self.frames)

    def stats(self):
        total = len(self.frames)
        padded = sum(1 for fr in self.frames if fr.padding)
        vbr = len({fr.bitrate for fr in self.frames}) > 1
        return {"total_frames": total, "padded_frames": padded, "vbr": vbr,
                "duration_sec": self.duration_seconds, "trailing_bytes": len(self.data) - self.end,
                "valid": total > 0}
