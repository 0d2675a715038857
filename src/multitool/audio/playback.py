"""Gapless playback of audio chunks arriving from the provider.

Hidden design decisions:
- Timing model: each chunk starts at max(next_start, now) and pushes
  next_start forward by its duration, so back-to-back chunks play without
  gaps and a late chunk starts immediately.
- Device output: one long-lived sounddevice OutputStream pulling from a
  FIFO, filled from the asyncio side and drained on the audio thread.
"""

import itertools
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .pcm import OUTPUT_SAMPLE_RATE, duration_seconds


@dataclass(frozen=True)
class ScheduledSource:
    """A chunk placed on the playback timeline."""

    source_id: int
    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


class PlaybackScheduler:
    """Pure timing model for queued playback; no audio I/O."""

    def __init__(self) -> None:
        self._next_start = 0.0
        self._sources: dict[int, ScheduledSource] = {}
        self._ids = itertools.count(1)

    @property
    def next_start(self) -> float:
        return self._next_start

    @property
    def active_sources(self) -> list[ScheduledSource]:
        return sorted(self._sources.values(), key=lambda s: s.start)

    def schedule(self, duration: float, now: float) -> ScheduledSource:
        """Place a chunk of ``duration`` seconds on the timeline."""
        if duration < 0:
            raise ValueError("duration must be non-negative")
        start = max(self._next_start, now)
        source = ScheduledSource(source_id=next(self._ids), start=start, duration=duration)
        self._sources[source.source_id] = source
        self._next_start = start + duration
        return source

    def mark_finished(self, source_id: int) -> None:
        self._sources.pop(source_id, None)

    def finish_until(self, now: float) -> list[ScheduledSource]:
        """Drop every source that has ended by ``now``."""
        done = [s for s in self._sources.values() if s.end <= now]
        for source in done:
            del self._sources[source.source_id]
        return done

    def interrupt(self) -> list[ScheduledSource]:
        """Stop everything and rewind the timeline."""
        stopped = self.active_sources
        self._sources.clear()
        self._next_start = 0.0
        return stopped


class AudioPlayer:
    """Plays float32 mono chunks back to back on the default output device.

    Example:
        player = AudioPlayer()
        player.start()
        player.enqueue(samples)
        ...
        player.close()
    """

    def __init__(
        self,
        sample_rate: int = OUTPUT_SAMPLE_RATE,
        blocksize: int = 1024,
        device: int | str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sample_rate = sample_rate
        self._blocksize = blocksize
        self._device = device
        self._clock = clock
        self._scheduler = PlaybackScheduler()
        self._queue: deque[tuple[int, NDArray[np.float32]]] = deque()
        self._offset = 0
        self._lock = threading.Lock()
        self._stream: Any | None = None

    @property
    def scheduler(self) -> PlaybackScheduler:
        return self._scheduler

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return bool(self._queue)

    @property
    def pending_seconds(self) -> float:
        with self._lock:
            frames = sum(len(samples) for _, samples in self._queue) - self._offset
        return duration_seconds(max(frames, 0), self._sample_rate)

    def start(self) -> None:
        """Open the output stream (idempotent)."""
        if self._stream is not None:
            return
        # PortAudio is loaded on import, so only touch it when a device is needed
        import sounddevice as sd

        self._stream = sd.OutputStream(
            samplerate=self._sample_rate,
            channels=1,
            dtype="float32",
            blocksize=self._blocksize,
            device=self._device,
            callback=self._callback,
        )
        self._stream.start()

    def enqueue(self, samples: NDArray[np.floating]) -> ScheduledSource:
        """Queue a chunk right after whatever is already queued."""
        chunk = np.asarray(samples, dtype=np.float32).reshape(-1)
        duration = duration_seconds(len(chunk), self._sample_rate)
        with self._lock:
            source = self._scheduler.schedule(duration, self._clock())
            if len(chunk):
                self._queue.append((source.source_id, chunk))
            else:
                self._scheduler.mark_finished(source.source_id)
        return source

    def interrupt(self) -> int:
        """Drop all queued audio. Returns the number of chunks stopped."""
        with self._lock:
            self._queue.clear()
            self._offset = 0
            return len(self._scheduler.interrupt())

    def fill(self, outdata: NDArray[np.float32]) -> int:
        """Copy queued audio into ``outdata`` (frames x 1), zero-padding the rest.

        Returns the number of frames written from the queue.
        """
        frames = outdata.shape[0]
        written = 0
        with self._lock:
            while written < frames and self._queue:
                source_id, samples = self._queue[0]
                take = min(frames - written, len(samples) - self._offset)
                outdata[written:written + take, 0] = samples[self._offset:self._offset + take]
                written += take
                self._offset += take
                if self._offset >= len(samples):
                    self._queue.popleft()
                    self._offset = 0
                    self._scheduler.mark_finished(source_id)
        outdata[written:] = 0
        return written

    def _callback(self, outdata: Any, frames: int, time_info: Any, status: Any) -> None:
        self.fill(outdata)

    def wait(self, poll: float = 0.05, timeout: float | None = None) -> None:
        """Block until the queue drains (for one-shot playback from the CLI)."""
        deadline = None if timeout is None else self._clock() + timeout
        while self.is_playing:
            if deadline is not None and self._clock() >= deadline:
                break
            time.sleep(poll)

    def close(self) -> None:
        """Stop playback and release the device."""
        self.interrupt()
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
