"""
Text extraction: receipt image / PDF → raw text via a vision model.
"""
from __future__ import annotations

import base64
import logging
from typing import Optional

from openai import AsyncOpenAI

from app.config import settings
from app.pipeline.llm import first_message_content, get_openai_client

logger = logging.getLogger(__name__)

EXTRACTION_INSTRUCTION = (
    "Extract all the text from this receipt image. "
    "Return only the raw text without any formatting or interpretation."
)


def _attachment_part(encoded: str, media_type: str, filename: str) -> dict:
    if media_type == "application/pdf":
        return {
            "type": "file",
            "file": {
                "filename": filename,
                "file_data": f"data:application/pdf;base64,{encoded}",
            },
        }
    if media_type == "image/jpg":
        media_type = "image/jpeg"
    return {
        "type": "image_url",
        "image_url": {"url": f"data:{media_type};base64,{encoded}"},
    }


class OpenAITextExtractor:
    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> None:
        self._client = client
        self.model = model or settings.EXTRACTION_MODEL
        self.max_tokens = max_tokens or settings.EXTRACTION_MAX_TOKENS

    async def extract_text(self, data: bytes, media_type: str, filename: str) -> str:
        encoded = base64.b64encode(data).decode("utf-8")
        client = self._client or get_openai_client()

        logger.info("Extraction request: model=%s  media_type=%s", self.model, media_type)
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": EXTRACTION_INSTRUCTION},
                        _attachment_part(encoded, media_type, filename),
                    ],
                }
            ],
            max_tokens=self.max_tokens,
        )

        content = first_message_content(response)
        if not content or not content.strip():
            raise ValueError("Extraction response contains no text")
        return content
