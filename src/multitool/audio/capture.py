"""Microphone capture.

The sounddevice callback runs on PortAudio's thread; frames are handed to
the asyncio loop with call_soon_threadsafe and consumed as an async
iterator.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .pcm import INPUT_SAMPLE_RATE


class MicrophoneCapture:
    """16 kHz mono float32 microphone frames as an async stream."""

    def __init__(
        self,
        sample_rate: int = INPUT_SAMPLE_RATE,
        blocksize: int = 4096,
        device: int | str | None = None,
        max_pending: int = 64,
    ) -> None:
        self._sample_rate = sample_rate
        self._blocksize = blocksize
        self._device = device
        self._max_pending = max_pending
        self._queue: asyncio.Queue[NDArray[np.float32] | None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stream: Any | None = None
        self._dropped = 0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def is_running(self) -> bool:
        return self._stream is not None

    @property
    def dropped_frames(self) -> int:
        """Blocks discarded because the consumer fell behind."""
        return self._dropped

    def start(self) -> None:
        """Open the input stream; must be called from the event loop thread."""
        if self._stream is not None:
            return
        import sounddevice as sd

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._max_pending)
        self._stream = sd.InputStream(
            samplerate=self._sample_rate,
            channels=1,
            dtype="float32",
            blocksize=self._blocksize,
            device=self._device,
            callback=self._callback,
        )
        self._stream.start()

    def _callback(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if self._loop is None or self._queue is None:
            return
        block = np.copy(indata[:, 0])
        self._loop.call_soon_threadsafe(self._put, block)

    def _put(self, block: NDArray[np.float32] | None) -> None:
        if self._queue is None:
            return
        if self._queue.full():
            # Keep latency bounded: the oldest block goes
            self._queue.get_nowait()
            self._dropped += 1
        self._queue.put_nowait(block)

    async def frames(self) -> AsyncIterator[NDArray[np.float32]]:
        """Yield captured blocks until ``stop`` is called."""
        if self._queue is None:
            raise RuntimeError("MicrophoneCapture.start() must be called first")
        while True:
            block = await self._queue.get()
            if block is None:
                return
            yield block

    def stop(self) -> None:
        """Close the device and end the ``frames`` iterator (idempotent)."""
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        if self._queue is not None:
            self._put(None)
