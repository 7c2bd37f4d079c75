# vision_gateway/providers/base.py
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass
class PageSummary:
    width: int
    height: int
    blocks: int
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "blocks": self.blocks,
            "confidence": self.confidence,
        }


@dataclass
class DocumentAnnotation:
    text: str
    pages: List[PageSummary] = field(default_factory=list)


class OcrProvider(ABC):
    """
    外部 OCR 服务的抽象接口。网关核心只依赖这个接口，
    测试中可以替换为返回固定数据的假实现。
    """

    mode: str = "live"

    @abstractmethod
    async def recognize_words(self, image_bytes: bytes) -> Sequence[Any]:
        """
        返回词级标注列表。按照 Cloud Vision 的约定，第一个元素是整段文字的汇总。
        """

    @abstractmethod
    async def recognize_document(self, image_bytes: bytes) -> Optional[DocumentAnnotation]:
        """文档模式识别，未找到文字时返回 None。"""
