"""Interface for the external language model."""

import base64
from typing import Protocol

ModelMessage = dict[str, str]


class TextGenerationClient(Protocol):
    """Interface for free-form text generation."""

    async def generate(
        self,
        *,
        model: str,
        messages: list[ModelMessage],
        image_data_url: str | None = None,
    ) -> str:
        """Return the model's text reply to the given messages."""


def to_data_url(image_bytes: bytes, mime_type: str | None = None) -> str:
    """Convert bytes to a base64 data URL for image input."""
    resolved = mime_type or detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{resolved};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
