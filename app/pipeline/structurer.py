"""
LLM receipt structurer.

Embeds the extracted raw text into a fixed prompt, asks the model for a
single JSON object and decodes it strictly into ``ParsedReceipt``.
"""
from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from app.config import settings
from app.pipeline.llm import first_message_content, get_openai_client
from app.schemas import Category, ParsedReceipt

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

_CATEGORIES = ", ".join(c.value for c in Category)

STRUCTURING_INSTRUCTIONS = f"""Extract the following information and return it as valid JSON:
- merchant: The name of the store/merchant
- date: The date in YYYY-MM-DD format
- items: Array of objects with name and price for each item
- subtotal: The subtotal amount (number)
- tax: The tax amount (number)
- total: The total amount (number)
- category: One of: {_CATEGORIES}
- paymentMethod: The payment method if available (optional)

Example response format:
{{
  "merchant": "Chipotle",
  "date": "2024-01-15",
  "items": [
    {{"name": "Burrito", "price": 9.99}},
    {{"name": "Drink", "price": 2.00}}
  ],
  "subtotal": 11.99,
  "tax": 0.85,
  "total": 12.84,
  "category": "Food",
  "paymentMethod": "Credit Card"
}}

Return only the JSON, no additional text."""


def build_structuring_prompt(raw_text: str) -> str:
    return f"Here's a receipt:\n{raw_text}\n\n{STRUCTURING_INSTRUCTIONS}"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

class ReceiptDecodeError(ValueError):
    """Structuring output is not a valid ``ParsedReceipt`` JSON object."""


def decode_parsed_receipt(content: Optional[str]) -> ParsedReceipt:
    if content is None or not content.strip():
        raise ReceiptDecodeError("Structuring response is empty")
    try:
        return ParsedReceipt.model_validate_json(content)
    except ValidationError as e:
        raise ReceiptDecodeError(
            f"Structuring response does not match the receipt schema "
            f"({e.error_count()} errors)"
        ) from e


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class OpenAIReceiptStructurer:
    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> None:
        self._client = client
        self.model = model or settings.STRUCTURING_MODEL
        self.temperature = (
            settings.STRUCTURING_TEMPERATURE if temperature is None else temperature
        )
        self.max_tokens = max_tokens or settings.STRUCTURING_MAX_TOKENS

    async def structure(self, raw_text: str) -> Optional[str]:
        """Return the model's raw reply; decoding is up to the caller."""
        client = self._client or get_openai_client()
        logger.info("Structuring request: model=%s  len=%d", self.model, len(raw_text))
        response = await client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": build_structuring_prompt(raw_text)}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return first_message_content(response)
