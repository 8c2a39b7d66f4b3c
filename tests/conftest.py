"""
Shared pytest fixtures

Provides:
- A fake vision model standing in for ChatOpenAI
- A FastAPI TestClient wired to that model
- Fake uploaded photo sources
"""

import json
from typing import List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from worksafe.core.config import get_settings
from worksafe.core.deps import get_analysis_service, get_llm
from worksafe.main import app
from worksafe.services.analysis_service import AnalysisService

# 1x1 transparent PNG
TINY_PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
TINY_PNG_DATA_URI = f"data:image/png;base64,{TINY_PNG_BASE64}"


class FakeVisionModel:
    """Records the messages it receives and answers with canned content"""

    def __init__(self, content: str = '{"risks": []}', error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[list] = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.content)


class FakeUpload:
    """Minimal stand-in for an uploaded file"""

    def __init__(
        self,
        data: bytes = b"\x89PNG fake image bytes",
        content_type: Optional[str] = "image/png",
        filename: str = "site.png",
        size: Optional[int] = None,
        fail: bool = False,
    ):
        self.data = data
        self.content_type = content_type
        self.filename = filename
        self.size = len(data) if size is None else size
        self.fail = fail

    async def read(self) -> bytes:
        if self.fail:
            raise OSError("read failed")
        return self.data


def risks_json(*risks) -> str:
    return json.dumps({"risks": list(risks)})


def openai_error(cls, status_code: int, message: str):
    """Build a typed OpenAI API error without a network round-trip"""
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return cls(message, response=response, body=None)


@pytest.fixture(autouse=True)
def provider_key(monkeypatch):
    """Configure a provider credential and fresh settings for every test"""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()
    get_llm.cache_clear()
    yield
    get_settings.cache_clear()
    get_llm.cache_clear()


@pytest.fixture
def fake_model():
    return FakeVisionModel()


@pytest.fixture
def api_client(fake_model):
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(
        llm=fake_model
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
