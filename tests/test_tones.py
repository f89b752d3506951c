import math
import struct

import numpy as np
import pytest

from alarm.tones import (
    ALARM_TONES, DEFAULT_TONE_ID, HEADER_SIZE, envelope, generate_sine_wave,
    get_tone, sample_count, tone_bytes, write_tone_file,
)


def _samples(wav: bytes) -> np.ndarray:
    return np.frombuffer(wav[HEADER_SIZE:], dtype="<i2")


def test_header_fields():
    wav = generate_sine_wave(660, 0.5)
    total = sample_count(0.5)
    data_size = total * 2

    assert wav[0:4] == b"RIFF"
    assert struct.unpack("<I", wav[4:8])[0] == 36 + data_size
    assert wav[8:12] == b"WAVE"
    assert wav[12:16] == b"fmt "
    fmt = struct.unpack("<IHHIIHH", wav[16:36])
    assert fmt == (16, 1, 1, 44100, 88200, 2, 16)
    assert wav[36:40] == b"data"
    assert struct.unpack("<I", wav[40:44])[0] == data_size


@pytest.mark.parametrize("frequency,seconds", [(660, 3.0), (440, 0.01), (880, 1.2345), (20, 0.1)])
def test_length_matches_sample_count(frequency, seconds):
    wav = generate_sine_wave(frequency, seconds)
    assert len(wav) == 44 + round(44100 * seconds) * 2


def test_samples_follow_faded_sine():
    frequency, seconds = 660, 0.2
    wav = generate_sine_wave(frequency, seconds)
    samples = _samples(wav)
    total = len(samples)

    for i in (0, 1, 50, 100, 1000, total // 2, total - 2, total - 1):
        raw = math.sin(2 * math.pi * frequency * i / 44100)
        expected = raw * envelope(i, total) * 32767
        assert abs(int(samples[i]) - expected) <= 0.5 + 1e-6


def test_first_sample_is_silent():
    samples = _samples(generate_sine_wave(520, 1.0))
    assert samples[0] == 0


def test_fade_regions_are_monotonic():
    total = 10000
    fade = round(total * 0.02)
    head = [envelope(i, total) for i in range(fade + 1)]
    tail = [envelope(i, total) for i in range(total - fade, total)]

    assert head == sorted(head)
    assert tail == sorted(tail, reverse=True)
    assert head[0] == 0.0
    assert envelope(total // 2, total) == 1.0


def test_envelope_bounds():
    assert envelope(0, 0) == 1.0
    assert envelope(5, -3) == 1.0
    # A single sample fades over at least one sample
    assert envelope(0, 1) == 0.0
    # 100 samples fade over 2 at each end
    assert envelope(1, 100) == 0.5
    assert envelope(99, 100) == 0.5
    assert envelope(98, 100) == 1.0


@pytest.mark.parametrize("frequency,seconds", [(0, 1.0), (-5, 1.0), (440, 0), (440, -1)])
def test_rejects_non_positive_input(frequency, seconds):
    with pytest.raises(ValueError):
        generate_sine_wave(frequency, seconds)


def test_catalog_and_lookup():
    ids = [t.id for t in ALARM_TONES]
    assert ids == ["classic", "sunrise", "pulse"]
    assert get_tone("pulse").frequency == 880
    assert get_tone("no-such-tone").id == DEFAULT_TONE_ID


def test_tone_bytes_are_cached():
    tone = get_tone("sunrise")
    assert tone_bytes(tone) is tone_bytes(tone)
    assert tone.bytes == generate_sine_wave(520, 3.0)


def test_write_tone_file(tmp_path):
    tone = get_tone("classic")
    path = write_tone_file(tone, tmp_path)
    assert path.exists()
    assert path.read_bytes() == tone.bytes
    # Second call reuses the file
    assert write_tone_file(tone, tmp_path) == path
