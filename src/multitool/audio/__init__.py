"""Audio pipeline: PCM conversion, microphone capture, gapless playback
and the live conversation session."""

from .capture import MicrophoneCapture
from .live import LIVE_MODEL, LiveConversation
from .pcm import (
    INPUT_SAMPLE_RATE,
    OUTPUT_SAMPLE_RATE,
    decode_pcm16,
    duration_seconds,
    encode_pcm16,
    pcm_blob,
    write_wav,
)
from .playback import AudioPlayer, PlaybackScheduler, ScheduledSource
from .transcript import TranscriptBuffer, TranscriptEntry

__all__ = [
    "INPUT_SAMPLE_RATE",
    "LIVE_MODEL",
    "OUTPUT_SAMPLE_RATE",
    "AudioPlayer",
    "LiveConversation",
    "MicrophoneCapture",
    "PlaybackScheduler",
    "ScheduledSource",
    "TranscriptBuffer",
    "TranscriptEntry",
    "decode_pcm16",
    "duration_seconds",
    "encode_pcm16",
    "pcm_blob",
    "write_wav",
]
