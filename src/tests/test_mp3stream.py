import struct
import sys
import unittest
from pathlib import Path

# Add src directory to path for imports
BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from mp3carve.mp3stream import (
    BITRATES,
    SAMPLERATES,
    MP3Stream,
    bitrate_for,
    build_frame,
    build_header,
    frame_length,
    parse_header,
    parse_header_bytes,
    samplerate_for,
)


def _word(b: bytes) -> int:
    return struct.unpack(">I", b)[0]


class TestLookupTables(unittest.TestCase):

    def test_bitrate_table(self):
        expected = [32000, 40000, 48000, 56000, 64000, 80000, 96000,
                    112000, 128000, 160000, 192000, 224000, 256000, 320000]
        self.assertEqual([bitrate_for(i) for i in range(1, 15)], expected)
        self.assertEqual(len(BITRATES), 14)

    def test_invalid_bitrate_indices(self):
        self.assertIsNone(bitrate_for(0))
        self.assertIsNone(bitrate_for(15))

    def test_samplerate_table_keeps_3200(self):
        """Index 2 maps to 3200 Hz, not the 32000 of the MPEG tables."""
        self.assertEqual([samplerate_for(i) for i in range(3)], [44100, 48000, 3200])
        self.assertIsNone(samplerate_for(3))
        self.assertNotIn(32000, SAMPLERATES.values())


class TestFrameLength(unittest.TestCase):

    def test_128k_44100(self):
        self.assertEqual(frame_length(128000, 44100, False), 417)
        self.assertEqual(frame_length(128000, 44100, True), 418)

    def test_other_rates(self):
        self.assertEqual(frame_length(320000, 44100, False), 1044)
        self.assertEqual(frame_length(320000, 48000, False), 960)
        self.assertEqual(frame_length(320000, 3200, False), 14400)
        self.assertEqual(frame_length(32000, 48000, True), 97)


class TestParseHeader(unittest.TestCase):

    def test_valid_header_fields(self):
        h = parse_header(_word(build_header(128000, 44100, padding=True)))
        self.assertIsNotNone(h)
        self.assertEqual(h.version, 0b11)
        self.assertEqual(h.layer, 0b01)
        self.assertEqual(h.bitrate, 128000)
        self.assertEqual(h.samplerate, 44100)
        self.assertTrue(h.padding)
        self.assertEqual(h.frame_length, 418)

    def test_every_table_entry_round_trips(self):
        for br in BITRATES.values():
            for sr in SAMPLERATES.values():
                with self.subTest(bitrate=br, samplerate=sr):
                    h = parse_header(_word(build_header(br, sr)))
                    self.assertEqual((h.bitrate, h.samplerate), (br, sr))

    def test_rejects_broken_sync(self):
        """A header without 11 leading one bits is never a frame start."""
        tail = build_header(128000, 44100)[1:]
        for b0 in range(0xFF):
            with self.subTest(b0=b0):
                self.assertIsNone(parse_header(_word(bytes([b0]) + tail)))
        for b1 in range(0xE0):
            for b2, b3 in ((0x00, 0x00), (0x90, 0x00), (0xE4, 0x41), (0xFF, 0xFF)):
                with self.subTest(b1=b1, b2=b2, b3=b3):
                    self.assertIsNone(parse_header(_word(bytes([0xFF, b1, b2, b3]))))

    def test_rejects_each_invalid_field(self):
        base = _word(build_header(128000, 44100))
        cases = {
            "mpeg2": (base & ~(0b11 << 19)) | (0b10 << 19),
            "mpeg2.5": base & ~(0b11 << 19),
            "reserved version": (base & ~(0b11 << 19)) | (0b01 << 19),
            "layer I": base | (0b11 << 17),
            "layer II": (base & ~(0b11 << 17)) | (0b10 << 17),
            "layer reserved": base & ~(0b11 << 17),
            "free bitrate": base & ~(0b1111 << 12),
            "bad bitrate": base | (0b1111 << 12),
            "reserved samplerate": base | (0b11 << 10),
            "reserved emphasis": base | 0b10,
        }
        for name, word in cases.items():
            with self.subTest(name):
                self.assertIsNone(parse_header(word))

    def test_allowed_emphasis_values(self):
        base = _word(build_header(128000, 44100))
        for emphasis in (0b00, 0b01, 0b11):
            with self.subTest(emphasis=emphasis):
                self.assertIsNotNone(parse_header(base | emphasis))

    def test_parse_header_bytes_bounds(self):
        hdr = build_header(64000, 48000)
        self.assertIsNotNone(parse_header_bytes(b"\x00" + hdr, 1))
        self.assertIsNone(parse_header_bytes(hdr[:3]))
        self.assertIsNone(parse_header_bytes(hdr, 1))

    def test_build_header_rejects_unknown_rates(self):
        with self.assertRaises(ValueError):
            build_header(8000, 44100)
        with self.assertRaises(ValueError):
            build_header(128000, 32000)


class TestMP3Stream(unittest.TestCase):

    def test_counts_frames_and_duration(self):
        data = b"".join(build_frame(128000, 44100, padding=(i % 2 == 1)) for i in range(10))
        st = MP3Stream(data)
        self.assertEqual(len(st.frames), 10)
        self.assertEqual(st.frames[1].offset, 417)
        stats = st.stats()
        self.assertEqual(stats["padded_frames"], 5)
        self.assertFalse(stats["vbr"])
        self.assertEqual(stats["trailing_bytes"], 0)
        self.assertAlmostEqual(stats["duration_sec"], 10 * 1152 / 44100)

    def test_vbr_and_trailing_bytes(self):
        data = build_frame(128000, 44100) + build_frame(320000, 48000) + b"junk"
        stats = MP3Stream(data).stats()
        self.assertEqual(stats["total_frames"], 2)
        self.assertTrue(stats["vbr"])
        self.assertEqual(stats["trailing_bytes"], 4)

    def test_skips_id3_tag(self):
        tag = b"ID3\x04\x00\x00" + bytes([0, 0, 0, 6]) + b"\x00" * 6
        data = tag + build_frame(64000, 44100) * 3
        st = MP3Stream(data)
        self.assertEqual(len(st.frames), 3)
        self.assertEqual(st.frames[0].offset, 16)

    def test_not_mp3(self):
        stats = MP3Stream(b"\x00" * 1000).stats()
        self.assertFalse(stats["valid"])
        self.assertEqual(stats["total_frames"], 0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
