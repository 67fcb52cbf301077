"""Hosted language-model boundary for the mentor chat."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Optional, Sequence

from google import genai
from google.genai import types

from boiler_ots.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """
You are a senior shift supervisor mentoring a trainee operator on a municipal
waste incineration boiler (reciprocating grate, three primary-air zones with two
rollers each, secondary air, superheater SH5). Answer in short, practical steps.
Always relate the answer to the live plant values given below. Never invent
plant values that are not given. If screenshots of the supervision console are
attached, read the trends and values on them before answering.
"""


class AdvisoryError(RuntimeError):
    """The hosted model could not produce an answer."""


@dataclass(frozen=True)
class ImageAttachment:
    """Inline image sent with a question: base64 payload plus MIME type."""

    data_base64: str
    mime_type: str = "image/jpeg"

    def to_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AdvisoryError(f"Invalid image attachment: {exc}") from exc


class AdvisoryClient:
    """Send plant context plus a question, receive advisory text."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.0-flash",
        client: Optional[genai.Client] = None,
    ):
        self.model = model
        self.client = client or genai.Client(api_key=api_key)

    def ask(
        self,
        question: str,
        context: str,
        images: Sequence[ImageAttachment] = (),
    ) -> str:
        parts = [
            types.Part.from_text(text=f"{SYSTEM_PROMPT}\nPlant values:\n{context}\n\nQuestion: {question}")
        ]
        for image in images:
            parts.append(types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type))

        try:
            response = self.client.models.generate_content(model=self.model, contents=parts)
        except Exception as exc:
            # Transport, quota and API errors all surface here
            logger.error("Advisory request failed: %s", exc)
            raise AdvisoryError(str(exc)) from exc

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise AdvisoryError("Empty answer from the advisory model")
        return text
