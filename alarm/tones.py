"""Built-in alarm tones and the sine-wave WAV synthesizer."""

import math
import struct
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import numpy as np

from . import TONE_CACHE_DIR

SAMPLE_RATE = 44100
BYTES_PER_SAMPLE = 2
HEADER_SIZE = 44

# Fraction of the tone faded in and out to avoid clicks
FADE_FRACTION = 0.02


@dataclass(frozen=True)
class AlarmTone:
    """A selectable alarm sound."""
    id: str
    label: str
    frequency: float
    duration: float = 3.0

    @property
    def bytes(self) -> bytes:
        """WAV bytes for the tone, generated once and cached."""
        return tone_bytes(self)

    def to_dict(self):
        return {
            "id": self.id,
            "label": self.label,
            "frequency": self.frequency,
            "duration": self.duration,
        }


ALARM_TONES = [
    AlarmTone(id="classic", label="Classic Chime", frequency=660),
    AlarmTone(id="sunrise", label="Gentle Sunrise", frequency=520),
    AlarmTone(id="pulse", label="Bright Pulse", frequency=880),
]

DEFAULT_TONE_ID = "classic"

_TONES_BY_ID = {tone.id: tone for tone in ALARM_TONES}


def is_known_tone(tone_id: str) -> bool:
    return tone_id in _TONES_BY_ID


def get_tone(tone_id: str) -> AlarmTone:
    """Look up a tone by id, falling back to the default tone."""
    tone = _TONES_BY_ID.get(tone_id)
    if tone is None:
        print(f"[Tone] Unknown tone '{tone_id}', using {DEFAULT_TONE_ID}")
        return _TONES_BY_ID[DEFAULT_TONE_ID]
    return tone


def sample_count(seconds: float, sample_rate: int = SAMPLE_RATE) -> int:
    """Number of samples in a tone of the given duration."""
    return int(math.floor(sample_rate * seconds + 0.5))


def _fade_samples(total_samples: int) -> int:
    """Number of samples in each fade ramp (2%, at least 1, at most half)."""
    fade = min(max(total_samples * FADE_FRACTION, 1), total_samples / 2)
    # Half rounds up, not to even
    return int(math.floor(fade + 0.5))


def envelope(sample: int, total_samples: int) -> float:
    """
    Linear fade-in/fade-out gain for a sample index.

    The first and last 2% of the samples (at least one, at most half)
    ramp between 0 and 1.
    """
    if total_samples <= 0:
        return 1.0
    fade_samples = _fade_samples(total_samples)
    if sample < fade_samples:
        return sample / fade_samples
    if sample > total_samples - fade_samples:
        return (total_samples - sample) / fade_samples
    return 1.0


def _envelope_array(total_samples: int) -> np.ndarray:
    """Vectorised form of envelope() over every sample index."""
    gains = np.ones(total_samples, dtype=np.float64)
    if total_samples <= 0:
        return gains
    fade_samples = _fade_samples(total_samples)
    index = np.arange(total_samples, dtype=np.float64)

    head = index < fade_samples
    gains[head] = index[head] / fade_samples

    tail = index > total_samples - fade_samples
    gains[tail] = (total_samples - index[tail]) / fade_samples
    return gains


def _wav_header(total_samples: int, sample_rate: int) -> bytes:
    """Build the 44-byte RIFF/WAVE header for mono 16-bit PCM."""
    data_size = total_samples * BYTES_PER_SAMPLE
    return b"".join([
        b"RIFF",
        struct.pack("<I", 36 + data_size),
        b"WAVE",
        b"fmt ",
        struct.pack("<I", 16),                 # PCM chunk size
        struct.pack("<H", 1),                  # Audio format (PCM)
        struct.pack("<H", 1),                  # Mono
        struct.pack("<I", sample_rate),
        struct.pack("<I", sample_rate * BYTES_PER_SAMPLE),
        struct.pack("<H", BYTES_PER_SAMPLE),
        struct.pack("<H", 8 * BYTES_PER_SAMPLE),
        b"data",
        struct.pack("<I", data_size),
    ])


def generate_sine_wave(frequency: float, seconds: float = 3.0,
                       sample_rate: int = SAMPLE_RATE) -> bytes:
    """
    Generate a faded sine tone as WAV bytes.

    Args:
        frequency: Tone frequency in Hz
        seconds: Duration in seconds
        sample_rate: Samples per second

    Returns:
        Header followed by little-endian 16-bit mono samples
    """
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")
    if seconds <= 0:
        raise ValueError(f"Duration must be positive, got {seconds}")

    total_samples = sample_count(seconds, sample_rate)

    t = np.arange(total_samples, dtype=np.float64) / sample_rate
    raw = np.sin(2 * np.pi * frequency * t)
    scaled = np.clip(raw * _envelope_array(total_samples) * 32767, -32768, 32767)
    # Round half away from zero (np.round rounds half to even)
    rounded = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)
    samples = rounded.astype("<i2")

    return _wav_header(total_samples, sample_rate) + samples.tobytes()


@lru_cache(maxsize=None)
def _cached_wave(frequency: float, duration: float) -> bytes:
    return generate_sine_wave(frequency, duration)


def tone_bytes(tone: AlarmTone) -> bytes:
    """WAV bytes for a tone; cached per (frequency, duration)."""
    return _cached_wave(float(tone.frequency), float(tone.duration))


def write_tone_file(tone: AlarmTone, directory: Path = None) -> Path:
    """
    Write the tone to a WAV file for the external player.

    The file is only written if it does not exist yet.
    """
    directory = Path(directory) if directory is not None else TONE_CACHE_DIR
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / f"{tone.id}_{int(tone.frequency)}hz_{tone.duration:g}s.wav"
    if not path.exists():
        path.write_bytes(tone_bytes(tone))
        print(f"[Tone] Wrote {tone.label} to {path}")
    return path
