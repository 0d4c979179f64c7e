import json

import httpx
import pytest
from fastapi.testclient import TestClient

from truthguard.config import Settings
from truthguard.main import create_app


def completion(content):
    """OpenAI-compatible chat completion body carrying `content`."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeGateway:
    """Records upstream calls and answers with a canned response."""

    def __init__(self, response=None):
        self.calls = []
        self.response = response or httpx.Response(200, json=completion("{}"))

    def reply_with(self, content: str) -> None:
        self.response = httpx.Response(200, json=completion(content))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    @property
    def last_payload(self):
        return json.loads(self.calls[-1].content)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def settings():
    return Settings(api_key="test-key", gateway_url="https://gateway.test/v1/chat/completions")


@pytest.fixture
def make_client(gateway):
    def _make(settings: Settings) -> TestClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(gateway.handler))
        return TestClient(create_app(settings, http_client=http_client))

    return _make


@pytest.fixture
def client(make_client, settings):
    return make_client(settings)
