"""Shared fixtures: generated PDFs and a fake Gemini SDK client."""

from types import SimpleNamespace
from typing import Any, Callable, Optional

import fitz
import pytest

from requirements_parser.client import GeminiClient
from requirements_parser.config import GeminiConfig
from requirements_parser.models import NativeExtractionResult


def make_pdf(pages: list[str], title: str = "", author: str = "") -> bytes:
    """Build a PDF with one text-layer page per entry (ASCII text only)."""
    document = fitz.open()
    for text in pages:
        page = document.new_page()
        if text:
            page.insert_text((72, 72), text)
    if title or author:
        document.set_metadata({"title": title, "author": author})
    data = document.tobytes()
    document.close()
    return data


class FakeModels:
    def __init__(self, reply: Any = "", error: Optional[BaseException] = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate_content(self, model: str, contents: list[Any], config: Any = None) -> Any:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        text = self.reply(contents) if callable(self.reply) else self.reply
        return SimpleNamespace(text=text)


class FakeGenAI:
    """Stands in for ``google.genai.Client``: only ``models.generate_content`` is used."""

    def __init__(self, reply: Any = "", error: Optional[BaseException] = None):
        self.models = FakeModels(reply=reply, error=error)


class StubNativeExtractor:
    def __init__(self, text: str, page_count: int = 1, title: Optional[str] = None, author: Optional[str] = None):
        self.result = NativeExtractionResult(text=text, page_count=page_count, title=title, author=author)
        self.calls: list[str] = []

    def extract(self, file_bytes: bytes, file_name: str = "unknown.pdf") -> NativeExtractionResult:
        self.calls.append(file_name)
        return self.result


class StubVisionExtractor:
    def __init__(self, text: str = "", error: Optional[BaseException] = None):
        self.text = text
        self.error = error
        self.calls: list[str] = []

    def transcribe(self, file_bytes: bytes, file_name: str = "unknown.pdf") -> str:
        self.calls.append(file_name)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    return make_pdf


@pytest.fixture
def fake_genai() -> Callable[..., FakeGenAI]:
    return FakeGenAI


@pytest.fixture
def gemini_client_factory() -> Callable[..., GeminiClient]:
    def build(reply: Any = "", error: Optional[BaseException] = None) -> GeminiClient:
        return GeminiClient(GeminiConfig(api_key="test-key"), client=FakeGenAI(reply=reply, error=error))

    return build


@pytest.fixture(autouse=True)
def _no_gemini_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    monkeypatch.delenv("GEMINI_VISION_MODEL", raising=False)
