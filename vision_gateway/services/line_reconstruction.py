# vision_gateway/services/line_reconstruction.py
"""
按阅读顺序把无序的词标注组合成行。

算法：
1. 按左上角 y 坐标升序排序（y 相同再按 x，排序稳定）。
2. 依次遍历，若当前词与本行锚点的 y 差值超过阈值则另起一行。
   锚点固定为开启该行的第一个词的 y，不会随后续词重新计算平均值，
   因此倾斜或弯曲的文字可能被拆成多行。
3. 每行内部按左上角 x 坐标从左到右排序，并用单个空格拼接文本。
4. 行号按创建顺序从 1 开始编号。
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .annotation_normalizer import WordAnnotation

DEFAULT_LINE_THRESHOLD = 20.0


@dataclass
class LineBoundingBox:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    def to_dict(self) -> Dict[str, float]:
        return {"min_x": self.min_x, "max_x": self.max_x, "min_y": self.min_y, "max_y": self.max_y}


@dataclass
class Line:
    line_number: int
    average_y: float
    words: List[WordAnnotation] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(word.text for word in self.words)

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def bounding_box(self) -> LineBoundingBox:
        # 只统计实际给出的顶点，旋转的词首个顶点不一定在左上角
        corners = [point for w in self.words for point in w.corners]
        if not corners:
            return LineBoundingBox(min_x=0, max_x=0, min_y=0, max_y=0)
        xs = [x for x, _ in corners]
        ys = [y for _, y in corners]
        return LineBoundingBox(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_number": self.line_number,
            "text": self.text,
            "word_count": self.word_count,
            "words": [
                {
                    "text": w.text,
                    "confidence": w.confidence,
                    "position": {"x": w.left, "y": w.top},
                }
                for w in self.words
            ],
            "bounding_box": self.bounding_box.to_dict(),
        }


def organize_text_by_lines(
    words: Iterable[WordAnnotation],
    line_threshold: float = DEFAULT_LINE_THRESHOLD,
) -> List[Line]:
    sorted_words = sorted(words, key=lambda w: (w.top, w.left))

    lines: List[Line] = []
    current = None
    for word in sorted_words:
        if current is None or abs(word.top - current.average_y) > line_threshold:
            current = Line(line_number=len(lines) + 1, average_y=word.top)
            lines.append(current)
        current.words.append(word)

    for line in lines:
        line.words.sort(key=lambda w: w.left)
    return lines
