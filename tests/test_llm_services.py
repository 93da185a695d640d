"""
OpenAI-backed extraction / structuring wrappers, exercised with a fake client.
"""
import asyncio
import base64
from types import SimpleNamespace

import pytest

from app.config import settings
from app.pipeline.extractor import EXTRACTION_INSTRUCTION, OpenAITextExtractor
from app.pipeline.llm import get_openai_client
from app.pipeline.structurer import OpenAIReceiptStructurer


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content):
    completions = FakeCompletions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


class TestExtractor:
    def test_image_sent_as_data_url(self):
        client, completions = fake_client("STORE\nTOTAL 1.00")
        extractor = OpenAITextExtractor(client=client, model="vision-model", max_tokens=500)

        text = asyncio.run(extractor.extract_text(b"\x89PNG", "image/png", "r.png"))

        assert text == "STORE\nTOTAL 1.00"
        req = completions.requests[0]
        assert req["model"] == "vision-model"
        assert req["max_tokens"] == 500
        parts = req["messages"][0]["content"]
        assert parts[0] == {"type": "text", "text": EXTRACTION_INSTRUCTION}
        encoded = base64.b64encode(b"\x89PNG").decode()
        assert parts[1]["image_url"]["url"] == f"data:image/png;base64,{encoded}"

    def test_jpg_alias_normalized(self):
        client, completions = fake_client("text")
        asyncio.run(OpenAITextExtractor(client=client).extract_text(b"x", "image/jpg", "r.jpg"))
        url = completions.requests[0]["messages"][0]["content"][1]["image_url"]["url"]
        assert url.startswith("data:image/jpeg;base64,")

    def test_pdf_sent_as_file_part(self):
        client, completions = fake_client("text")
        asyncio.run(
            OpenAITextExtractor(client=client).extract_text(b"%PDF-1.4", "application/pdf", "r.pdf")
        )
        part = completions.requests[0]["messages"][0]["content"][1]
        assert part["type"] == "file"
        assert part["file"]["filename"] == "r.pdf"
        assert part["file"]["file_data"].startswith("data:application/pdf;base64,")

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_empty_response_is_an_error(self, content):
        client, _ = fake_client(content)
        with pytest.raises(ValueError):
            asyncio.run(OpenAITextExtractor(client=client).extract_text(b"x", "image/png", "r.png"))


class TestStructurer:
    def test_low_temperature_and_prompt(self):
        client, completions = fake_client('{"merchant": "X"}')
        structurer = OpenAIReceiptStructurer(client=client, model="text-model")

        content = asyncio.run(structurer.structure("RAW RECEIPT TEXT"))

        assert content == '{"merchant": "X"}'
        req = completions.requests[0]
        assert req["model"] == "text-model"
        assert req["temperature"] == 0.1
        prompt = req["messages"][0]["content"]
        assert prompt.startswith("Here's a receipt:\nRAW RECEIPT TEXT")

    def test_temperature_override(self):
        client, completions = fake_client("{}")
        asyncio.run(OpenAIReceiptStructurer(client=client, temperature=0).structure("t"))
        assert completions.requests[0]["temperature"] == 0


class TestClientFactory:
    @pytest.fixture(autouse=True)
    def _fresh_client(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_BASE_URL", None)
        get_openai_client.cache_clear()
        yield
        get_openai_client.cache_clear()

    def test_retries_disabled_and_timeout_applied(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
        monkeypatch.setattr(settings, "LLM_TIMEOUT", 7.5)
        client = get_openai_client()
        assert client.max_retries == 0
        assert client.timeout == 7.5

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
        with pytest.raises(RuntimeError):
            get_openai_client()
