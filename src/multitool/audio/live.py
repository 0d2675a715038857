"""Live voice conversation over the Gemini Live API.

Hidden design decisions:
- Session lifetime: one background task owns the websocket session; the
  microphone pump and the receive loop both run under it
- Server message handling: transcription fragments, turn boundaries,
  barge-in interruptions and inline audio chunks
- Device ownership: capture and playback objects are created per session
  through factories, so tests can swap them out
"""

import asyncio
import contextlib
from collections.abc import Callable
from typing import Any

from google import genai
from google.genai import errors, types

from ..llm import DebugCallback
from .capture import MicrophoneCapture
from .pcm import INPUT_SAMPLE_RATE, decode_pcm16, pcm_blob
from .playback import AudioPlayer
from .transcript import TranscriptBuffer, TranscriptEntry

LIVE_MODEL = "gemini-2.5-flash-native-audio-preview-09-2025"
LIVE_VOICE = "Zephyr"

STATUS_IDLE = "Idle"
STATUS_INITIALIZING = "Initializing..."
STATUS_LISTENING = "Connected, listening..."
STATUS_STOPPING = "Stopping..."
STATUS_CLOSED = "Connection closed"
STATUS_ERROR = "Error"

# Websocket close code for a normal shutdown
NORMAL_CLOSE_CODE = 1000

StatusCallback = Callable[[str], None]
TranscriptCallback = Callable[[list[TranscriptEntry]], None]


class LiveConversation:
    """Real-time spoken conversation with transcripts.

    Example:
        live = LiveConversation(client)
        live.set_transcript_callback(print)
        await live.start()
        ...
        await live.stop()
    """

    def __init__(
        self,
        client: genai.Client,
        model: str = LIVE_MODEL,
        voice: str = LIVE_VOICE,
        capture_factory: Callable[[], Any] = MicrophoneCapture,
        player_factory: Callable[[], Any] = AudioPlayer,
    ) -> None:
        self._client = client
        self._model = model
        self._voice = voice
        self._capture_factory = capture_factory
        self._player_factory = player_factory
        self._transcript = TranscriptBuffer()
        self._status = STATUS_IDLE
        self._task: asyncio.Task | None = None
        self._capture: Any | None = None
        self._player: Any | None = None
        self._status_callback: StatusCallback | None = None
        self._transcript_callback: TranscriptCallback | None = None
        self._debug_callback: DebugCallback | None = None

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def transcript(self) -> TranscriptBuffer:
        return self._transcript

    def set_status_callback(self, callback: StatusCallback | None) -> None:
        self._status_callback = callback

    def set_transcript_callback(self, callback: TranscriptCallback | None) -> None:
        """Called with the full entry list whenever a turn is flushed."""
        self._transcript_callback = callback

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set debug callback: Callable(level, component, message)."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Live", message)

    def _set_status(self, status: str) -> None:
        self._status = status
        self._debug("debug", f"Status: {status}")
        if self._status_callback:
            self._status_callback(status)

    def build_config(self) -> types.LiveConnectConfig:
        return types.LiveConnectConfig(
            response_modalities=[types.Modality.AUDIO],
            input_audio_transcription=types.AudioTranscriptionConfig(),
            output_audio_transcription=types.AudioTranscriptionConfig(),
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self._voice)
                )
            ),
        )

    async def start(self) -> None:
        """Open the session and start streaming; no-op when already running."""
        if self.is_running:
            return
        self._set_status(STATUS_INITIALIZING)
        self._transcript.reset()
        self._task = asyncio.create_task(self._run())
        self._task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        # Re-announce the final status once is_running reads False; stop() reports its own
        if task is self._task and self._status_callback:
            self._status_callback(self._status)

    async def _run(self) -> None:
        try:
            self._player = self._player_factory()
            self._player.start()
            async with self._client.aio.live.connect(model=self._model, config=self.build_config()) as session:
                self._set_status(STATUS_LISTENING)
                self._capture = self._capture_factory()
                self._capture.start()
                sender = asyncio.create_task(self._pump_microphone(session, self._capture))
                try:
                    await self._receive_loop(session)
                finally:
                    sender.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await sender
            self._set_status(STATUS_CLOSED)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._debug("error", f"Live session failed: {e}")
            self._set_status(STATUS_ERROR)
        finally:
            self._release_devices()

    async def _pump_microphone(self, session: Any, capture: Any) -> None:
        rate = getattr(capture, "sample_rate", INPUT_SAMPLE_RATE)
        async for block in capture.frames():
            await session.send_realtime_input(audio=pcm_blob(block, rate))

    async def _receive_loop(self, session: Any) -> None:
        # Older SDKs end receive() after each turn; an empty pass means the server hung up
        try:
            while True:
                received = 0
                async for message in session.receive():
                    received += 1
                    self.handle_message(message)
                if received == 0:
                    return
        except errors.APIError as e:
            if e.code != NORMAL_CLOSE_CODE:
                raise
            self._debug("info", "Server closed the session")

    def handle_message(self, message: Any) -> None:
        """Route one server message to the transcript and the speaker."""
        content = getattr(message, "server_content", None)
        if content is None:
            return

        if content.output_transcription and content.output_transcription.text:
            self._transcript.add_output(content.output_transcription.text)
        elif content.input_transcription and content.input_transcription.text:
            self._transcript.add_input(content.input_transcription.text)

        if content.turn_complete:
            added = self._transcript.flush_turn()
            if added and self._transcript_callback:
                self._transcript_callback(list(self._transcript.entries))

        if content.interrupted and self._player is not None:
            stopped = self._player.interrupt()
            self._debug("info", f"Interrupted, dropped {stopped} queued chunk(s)")

        audio = self._first_audio(content)
        if audio is not None and self._player is not None:
            self._player.enqueue(decode_pcm16(audio))

    @staticmethod
    def _first_audio(content: Any) -> bytes | str | None:
        turn = content.model_turn
        if not turn or not turn.parts:
            return None
        inline = turn.parts[0].inline_data
        return inline.data if inline and inline.data else None

    def _release_devices(self) -> None:
        if self._capture is not None:
            self._capture.stop()
            self._capture = None
        if self._player is not None:
            self._player.close()
            self._player = None

    async def stop(self) -> None:
        """End the session and release devices (idempotent)."""
        if self._task is None:
            return
        self._set_status(STATUS_STOPPING)
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._release_devices()
        self._set_status(STATUS_IDLE)
