"""Input and output guardrails around the model call.

ImageGuard validates image data URIs server-side (the UI checks the same
constraints, but nothing stops a client from skipping it). OutputGuard cleans
free text salvaged from a model reply before it is shown to the user.
"""

import base64
import binascii
import os
import re
from dataclasses import dataclass

import structlog

from revodev.api.schemas import InlineImage
from revodev.flows.fallbacks import with_contact

logger = structlog.get_logger(__name__)

DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_OUTPUT_LENGTH = 10_000

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)

# Zero-width and invisible Unicode characters
_INVISIBLE_CHARS = re.compile(
    r"[\u200b\u200c\u200d\u200e\u200f\u2060\u2061\u2062\u2063\u2064\ufeff]"
)

_TRACEBACK = re.compile(r"Traceback \(most recent call last\)")


@dataclass
class GuardrailResult:
    """Result of a guardrail check."""
    passed: bool
    reason: str = ""


def parse_data_uri(data_uri: str) -> InlineImage | None:
    """Split `data:<mime>;base64,<payload>` into its parts.

    Returns:
        InlineImage, or None if the string is not a base64 data URI.
    """
    match = _DATA_URI.match(data_uri.strip())
    if not match:
        return None
    return InlineImage(mime_type=match.group("mime").lower(), base64_data=match.group("data").strip())


class ImageGuard:
    """Validates attached images: image/* MIME type, valid base64, size cap."""

    def __init__(self, max_bytes: int | None = None):
        self.max_bytes = max_bytes or int(os.environ.get("MAX_IMAGE_BYTES", str(DEFAULT_MAX_IMAGE_BYTES)))

    def check(self, data_uri: str) -> tuple[InlineImage | None, GuardrailResult]:
        """Validate a data URI. Returns (image, result); image is None on failure."""
        image = parse_data_uri(data_uri)
        if image is None:
            logger.info("guardrail.image_rejected", reason="not_a_data_uri")
            return None, GuardrailResult(False, "invalid_data_uri")

        if not image.mime_type.startswith("image/"):
            logger.info("guardrail.image_rejected", reason="mime_type", mime_type=image.mime_type)
            return None, GuardrailResult(False, "unsupported_mime_type")

        # Cheap upper bound before decoding: 4 base64 chars -> 3 bytes
        if len(image.base64_data) * 3 // 4 > self.max_bytes + 3:
            logger.info("guardrail.image_rejected", reason="too_large")
            return None, GuardrailResult(False, "image_too_large")

        try:
            decoded = base64.b64decode(image.base64_data, validate=True)
        except (binascii.Error, ValueError):
            logger.info("guardrail.image_rejected", reason="bad_base64")
            return None, GuardrailResult(False, "invalid_base64")

        if len(decoded) > self.max_bytes:
            logger.info("guardrail.image_rejected", reason="too_large", size=len(decoded))
            return None, GuardrailResult(False, "image_too_large")

        return image, GuardrailResult(True)


class OutputGuard:
    """Sanitizes free text before it is returned to the user."""

    def check(self, text: str) -> tuple[str, GuardrailResult]:
        """Validate and sanitize output. Returns (cleaned_text, result)."""
        if not text:
            return text, GuardrailResult(True)

        cleaned = _INVISIBLE_CHARS.sub("", text).strip()

        if _TRACEBACK.search(cleaned):
            logger.warning("guardrail.output_blocked", reason="traceback")
            return (
                with_contact("An internal error occurred. Please try again."),
                GuardrailResult(False, "traceback_detected"),
            )

        # Drop markdown code fences the model sometimes wraps prose in
        if cleaned.startswith("```") and cleaned.endswith("```"):
            cleaned = re.sub(r"^```[\w-]*\s*|\s*```$", "", cleaned).strip()

        if len(cleaned) > MAX_OUTPUT_LENGTH:
            logger.warning("guardrail.output_truncated", original_len=len(cleaned))
            cleaned = cleaned[:MAX_OUTPUT_LENGTH] + "\n\n[Response truncated]"

        return cleaned, GuardrailResult(True)
