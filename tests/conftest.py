"""
Shared fixtures: a fake OCR provider returning fixed annotation fixtures and a
TestClient wired to it through dependency overrides.
"""

import pytest
from fastapi.testclient import TestClient

from vision_gateway.api.v1.ocr import get_ocr_provider
from vision_gateway.main import app
from vision_gateway.providers.base import OcrProvider


class FakeOcrProvider(OcrProvider):
    mode = "fake"

    def __init__(self, annotations=None, document=None, error=None):
        self.annotations = annotations or []
        self.document = document
        self.error = error
        self.calls = []

    async def recognize_words(self, image_bytes):
        self.calls.append(image_bytes)
        if self.error:
            raise self.error
        return self.annotations

    async def recognize_document(self, image_bytes):
        self.calls.append(image_bytes)
        if self.error:
            raise self.error
        return self.document


@pytest.fixture
def fake_provider():
    return FakeOcrProvider()


@pytest.fixture
def client(fake_provider):
    app.dependency_overrides[get_ocr_provider] = lambda: fake_provider
    yield TestClient(app)
    app.dependency_overrides.clear()
