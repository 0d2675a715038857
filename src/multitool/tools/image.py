"""Image generation, editing and analysis."""

from google.genai import types

from .base import GeminiTool, ToolError
from .models import IMAGE_ASPECT_RATIOS, GeneratedImage, MediaInput

GENERATE_MODEL = "imagen-4.0-generate-001"
EDIT_MODEL = "gemini-2.5-flash-image"
ANALYZE_MODEL = "gemini-2.5-flash"
ANALYZE_PROMPT = "Describe this image in detail."


class ImageTools(GeminiTool):
    """Generate / Edit / Analyze sub-tools of the image panel."""

    component = "Image"

    async def generate(self, prompt: str, aspect_ratio: str = "1:1") -> list[GeneratedImage]:
        """Create one PNG image from a text prompt."""
        self._require_text(prompt)
        if aspect_ratio not in IMAGE_ASPECT_RATIOS:
            raise ValueError(
                f"Unsupported aspect ratio: {aspect_ratio}. "
                f"Supported: {', '.join(IMAGE_ASPECT_RATIOS)}"
            )

        try:
            response = await self._client.aio.models.generate_images(
                model=GENERATE_MODEL,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/png",
                    aspect_ratio=aspect_ratio,
                ),
            )
        except Exception as e:
            self._debug("error", f"generate_images failed: {e}")
            raise ToolError("Failed to generate images. Please try again.") from e

        images = [
            GeneratedImage(data=generated.image.image_bytes, mime_type="image/png")
            for generated in (response.generated_images or [])
            if generated.image and generated.image.image_bytes
        ]
        if not images:
            raise ToolError("Failed to generate images. Please try again.")
        self._debug("info", f"Generated {len(images)} image(s) at {aspect_ratio}")
        return images

    async def edit(self, image: MediaInput, prompt: str) -> GeneratedImage:
        """Apply a text instruction to an uploaded image."""
        self._require_text(prompt)
        if not image.is_image:
            raise ValueError(f"Expected an image file, got {image.mime_type}")

        try:
            response = await self._generate(
                EDIT_MODEL,
                [types.Part.from_bytes(data=image.data, mime_type=image.mime_type), prompt],
                types.GenerateContentConfig(response_modalities=[types.Modality.IMAGE]),
            )
        except Exception as e:
            self._debug("error", f"Image edit failed: {e}")
            raise ToolError("Failed to edit image. Please try again.") from e

        for inline in self._inline_parts(response):
            if inline.data:
                return GeneratedImage(data=inline.data, mime_type=inline.mime_type or "image/png")
        raise ToolError("Failed to edit image. Please try again.")

    async def analyze(self, image: MediaInput, prompt: str = ANALYZE_PROMPT) -> str:
        """Describe an uploaded image."""
        if not image.is_image:
            raise ValueError(f"Expected an image file, got {image.mime_type}")

        try:
            response = await self._generate(
                ANALYZE_MODEL,
                [types.Part.from_bytes(data=image.data, mime_type=image.mime_type), prompt],
            )
        except Exception as e:
            self._debug("error", f"Image analysis failed: {e}")
            raise ToolError("Failed to analyze image. Please try again.") from e
        return self._extract_text(response)
