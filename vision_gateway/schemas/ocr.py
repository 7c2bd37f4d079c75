# vision_gateway/schemas/ocr.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union

Coordinate = Union[int, float]


class CamelModel(BaseModel):
    # JSON 使用 camelCase，Python 内部使用 snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- 请求体 ---

class UrlRequest(CamelModel):
    image_url: str = Field(..., min_length=1, description="图片的 URL")


class Base64Request(CamelModel):
    base64_image: str = Field(..., min_length=1, description="base64 编码的图片，可带 data URL 前缀")


# --- 词与行 ---

class Vertex(CamelModel):
    x: Coordinate = 0
    y: Coordinate = 0


class BoundingPoly(CamelModel):
    vertices: List[Vertex] = Field(default_factory=list)


class WordDetail(CamelModel):
    text: str
    confidence: float
    bounding_box: BoundingPoly


class WordPosition(CamelModel):
    x: Coordinate
    y: Coordinate


class LineWord(CamelModel):
    text: str
    confidence: float
    position: WordPosition


class LineBoundingBox(CamelModel):
    min_x: Coordinate
    max_x: Coordinate
    min_y: Coordinate
    max_y: Coordinate


class LineItem(CamelModel):
    line_number: int = Field(..., ge=1)
    text: str
    word_count: int
    words: List[LineWord]
    bounding_box: LineBoundingBox


# --- 附加信息 ---

class FileInfo(CamelModel):
    name: str
    size: int
    type: str


class InputInfo(CamelModel):
    image_url: Optional[str] = None
    base64_length: Optional[int] = None


class ApiInfo(CamelModel):
    endpoint: str
    method: str
    timestamp: str


class TextMetadata(CamelModel):
    total_words: int
    total_lines: int
    timestamp: str
    mode: str


class OCRResponse(CamelModel):
    success: bool
    message: str
    text: str = ""
    word_count: int = 0
    lines: List[LineItem] = Field(default_factory=list, description="按阅读顺序重组的行")
    details: List[WordDetail] = Field(default_factory=list, description="识别出的词列表")
    metadata: Optional[TextMetadata] = None
    file: Optional[FileInfo] = None
    input: Optional[InputInfo] = None
    api: Optional[ApiInfo] = None


# --- 文档模式 ---

class PageItem(CamelModel):
    width: int
    height: int
    blocks: int
    confidence: float


class DocumentMetadata(CamelModel):
    total_pages: int
    timestamp: str


class DocumentResponse(CamelModel):
    success: bool
    message: str
    text: str = ""
    pages: List[PageItem] = Field(default_factory=list)
    metadata: Optional[DocumentMetadata] = None
    file: Optional[FileInfo] = None
    api: Optional[ApiInfo] = None
