"""16-bit PCM conversion helpers.

Gemini's audio endpoints speak raw little-endian int16 PCM: 16 kHz going
in, 24 kHz coming back. Device streams work in float32, so everything
crossing that boundary goes through here.
"""

import base64
import wave
from pathlib import Path

import numpy as np
from google.genai import types
from numpy.typing import NDArray

INPUT_SAMPLE_RATE = 16000
OUTPUT_SAMPLE_RATE = 24000
PCM_SCALE = 32768.0


def encode_pcm16(samples: NDArray[np.floating]) -> bytes:
    """Convert float samples in [-1, 1] to little-endian int16 bytes.

    Out-of-range samples are clipped rather than wrapped.
    """
    clipped = np.clip(np.asarray(samples, dtype=np.float32).reshape(-1), -1.0, 1.0)
    scaled = np.clip(np.round(clipped * PCM_SCALE), -PCM_SCALE, PCM_SCALE - 1)
    return scaled.astype("<i2").tobytes()


def decode_pcm16(data: bytes | str, channels: int = 1) -> NDArray[np.float32]:
    """Convert int16 PCM (raw bytes or base64 text) to float32 samples.

    Returns shape (frames,) for mono and (frames, channels) otherwise. A
    trailing odd byte is dropped.
    """
    raw = base64.b64decode(data) if isinstance(data, str) else data
    usable = len(raw) - (len(raw) % 2)
    samples = np.frombuffer(raw[:usable], dtype="<i2").astype(np.float32) / PCM_SCALE
    if channels > 1:
        frames = len(samples) // channels
        return samples[: frames * channels].reshape(frames, channels)
    return samples


def duration_seconds(sample_count: int, sample_rate: int, channels: int = 1) -> float:
    """Playback length of ``sample_count`` interleaved samples."""
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    return sample_count / channels / sample_rate


def pcm_blob(samples: NDArray[np.floating], sample_rate: int = INPUT_SAMPLE_RATE) -> types.Blob:
    """Wrap microphone samples as a realtime-input blob."""
    return types.Blob(data=encode_pcm16(samples), mime_type=f"audio/pcm;rate={sample_rate}")


def write_wav(path: str | Path, pcm: bytes, sample_rate: int = OUTPUT_SAMPLE_RATE, channels: int = 1) -> Path:
    """Write raw int16 PCM into a WAV container."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(target), "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return target
