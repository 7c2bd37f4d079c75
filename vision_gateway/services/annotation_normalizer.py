# vision_gateway/services/annotation_normalizer.py
"""
把 OCR 服务返回的原始标注转换为统一的 WordAnnotation 列表。

支持两种输入形态：
- Google Cloud Vision 的 proto-plus 对象（description / score / bounding_poly.vertices）
- 普通字典（JSON 形态，键名可以是 camelCase 或 snake_case）

任何缺失的坐标一律按 0 处理，缺失的置信度按 0 处理，不抛出异常。
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

_EMPTY_VERTICES: Tuple[Point, Point, Point, Point] = ((0, 0), (0, 0), (0, 0), (0, 0))
_ALL_PRESENT: Tuple[bool, bool, bool, bool] = (True, True, True, True)


@dataclass(frozen=True)
class WordAnnotation:
    """
    单个识别出的词。vertices 顺序：左上、右上、右下、左下。
    present 标记每个顶点是否由 OCR 服务实际给出，缺失的顶点坐标按 0 填充。
    """
    text: str
    confidence: float = 0.0
    vertices: Tuple[Point, Point, Point, Point] = _EMPTY_VERTICES
    present: Tuple[bool, bool, bool, bool] = _ALL_PRESENT

    @property
    def left(self) -> float:
        return self.vertices[0][0]

    @property
    def top(self) -> float:
        return self.vertices[0][1]

    @property
    def right(self) -> float:
        return self.vertices[2][0]

    @property
    def bottom(self) -> float:
        return self.vertices[2][1]

    @property
    def corners(self) -> List[Point]:
        return [v for v, given in zip(self.vertices, self.present) if given]

    def as_tuple(self) -> Tuple[str, float, float, float, float, float]:
        return (self.text, self.confidence, self.left, self.top, self.right, self.bottom)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "bounding_box": {
                "vertices": [{"x": x, "y": y} for x, y in self.vertices],
            },
        }


def _get(obj: Any, *names: str) -> Any:
    """按顺序尝试多个字段名，兼容字典和属性对象。"""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _vertices(annotation: Any) -> Tuple[Tuple[Point, Point, Point, Point], Tuple[bool, bool, bool, bool]]:
    poly = _get(annotation, "bounding_poly", "boundingPoly", "bounding_box", "boundingBox")
    raw_vertices = _get(poly, "vertices")
    try:
        raw_vertices = list(raw_vertices) if raw_vertices is not None else []
    except TypeError:
        raw_vertices = []

    points: List[Point] = []
    present: List[bool] = []
    for i in range(4):
        vertex = raw_vertices[i] if i < len(raw_vertices) else None
        x, y = _get(vertex, "x"), _get(vertex, "y")
        points.append((_number(x), _number(y)))
        present.append(x is not None or y is not None)
    return tuple(points), tuple(present)  # type: ignore[return-value]


def _confidence(annotation: Any) -> float:
    value = _number(_get(annotation, "score", "confidence"))
    return min(max(float(value), 0.0), 1.0)


def normalize_word(annotation: Any) -> Optional[WordAnnotation]:
    text = _get(annotation, "description", "text")
    text = str(text).strip() if text is not None else ""
    if not text:
        return None
    vertices, present = _vertices(annotation)
    return WordAnnotation(text=text, confidence=_confidence(annotation), vertices=vertices, present=present)


def normalize_annotations(annotations: Optional[Sequence[Any]]) -> Tuple[str, List[WordAnnotation]]:
    """
    返回 (full_text, words)。

    第一个标注是整段文字的汇总，不计入词列表。没有任何标注时返回 ("", [])，
    由调用方当作“未找到文字”处理。
    """
    if not annotations:
        return "", []

    annotations = list(annotations)
    full_text = _get(annotations[0], "description", "text")
    full_text = str(full_text) if full_text is not None else ""

    words: List[WordAnnotation] = []
    for annotation in annotations[1:]:
        word = normalize_word(annotation)
        if word is None:
            logger.debug("跳过空文本标注: %r", annotation)
            continue
        words.append(word)
    return full_text, words
