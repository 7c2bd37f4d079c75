# vision_gateway/providers/mock.py
from typing import Any, Dict, List, Optional, Sequence

from .base import DocumentAnnotation, OcrProvider, PageSummary

MOCK_TEXT = "Mock OCR Result"


class MockOcrProvider(OcrProvider):
    """未配置 Google Cloud 凭据时使用，返回固定的演示数据（没有坐标信息）。"""

    mode = "mock"

    async def recognize_words(self, image_bytes: bytes) -> Sequence[Any]:
        annotations: List[Dict[str, Any]] = [{"description": MOCK_TEXT}]
        for text, score in (("Mock", 0.95), ("OCR", 0.98), ("Result", 0.92)):
            annotations.append({"description": text, "score": score, "boundingPoly": {"vertices": []}})
        return annotations

    async def recognize_document(self, image_bytes: bytes) -> Optional[DocumentAnnotation]:
        return DocumentAnnotation(
            text=MOCK_TEXT,
            pages=[PageSummary(width=0, height=0, blocks=1, confidence=0.95)],
        )
