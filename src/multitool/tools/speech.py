"""Text-to-speech."""

from google.genai import types

from ..audio.pcm import OUTPUT_SAMPLE_RATE
from .base import GeminiTool, ToolError
from .models import VOICES, SpeechResult

TTS_MODEL = "gemini-2.5-flash-preview-tts"


class SpeechTools(GeminiTool):
    """Converts text into 24 kHz mono speech with a prebuilt voice."""

    component = "Speech"

    async def synthesize(self, text: str, voice: str = "Kore") -> SpeechResult:
        self._require_text(text, "Text")
        if voice not in VOICES:
            raise ValueError(f"Unknown voice: {voice}. Available: {', '.join(VOICES)}")

        config = types.GenerateContentConfig(
            response_modalities=[types.Modality.AUDIO],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice)
                )
            ),
        )
        try:
            response = await self._generate(TTS_MODEL, text, config)
        except Exception as e:
            self._debug("error", f"TTS request failed: {e}")
            raise ToolError("Failed to generate audio. Please try again.") from e

        for inline in self._inline_parts(response):
            if inline.data:
                self._debug("info", f"Synthesized {len(inline.data)} bytes with voice {voice}")
                return SpeechResult(pcm=inline.data, sample_rate=OUTPUT_SAMPLE_RATE, voice=voice)
        raise ToolError("No audio data received from API.")
