# vision_gateway/services/ocr_service.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..core.config import settings
from ..providers.base import OcrProvider
from ..providers.mock import MockOcrProvider
from .annotation_normalizer import normalize_annotations
from .image_source import decode_base64_image, fetch_image
from .line_reconstruction import organize_text_by_lines

# 配置日志
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def load_ocr_provider() -> OcrProvider:
    """
    在应用启动时根据环境变量选择凭据方式并创建 OCR 服务。
    没有任何凭据时退回到 mock 模式。
    """
    if not settings.GOOGLE_CLOUD_API_KEY and not settings.GOOGLE_APPLICATION_CREDENTIALS:
        logger.warning("未找到 Google Cloud 凭据，OCR 将以 mock 模式运行。")
        return MockOcrProvider()

    from ..providers.google_vision import GoogleVisionProvider, create_vision_client

    client = create_vision_client(
        api_key=settings.GOOGLE_CLOUD_API_KEY,
        credentials_file=settings.GOOGLE_APPLICATION_CREDENTIALS,
        project_id=settings.GOOGLE_CLOUD_PROJECT_ID,
        endpoint=settings.VISION_API_ENDPOINT,
    )
    logger.info("Google Cloud Vision 客户端初始化完成。")
    return GoogleVisionProvider(client, language_hints=settings.language_hints)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def no_text_result(message: str = "未在图片中找到文字。") -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "text": "",
        "word_count": 0,
        "lines": [],
        "details": [],
    }


def build_text_result(
    annotations: Optional[Sequence[Any]],
    *,
    line_threshold: Optional[float] = None,
    mode: str = "live",
) -> Dict[str, Any]:
    """
    把原始标注整理成响应结构：全文、词数、按行重组的结果和扁平词列表。
    对任何形态的输入都不抛异常。
    """
    if not annotations:
        return no_text_result()

    if line_threshold is None:
        line_threshold = settings.OCR_LINE_THRESHOLD

    full_text, words = normalize_annotations(annotations)
    text = full_text.strip()
    if not text and not words:
        return no_text_result()
    lines = organize_text_by_lines(words, line_threshold=line_threshold)

    return {
        "success": True,
        "message": "识别成功。",
        "text": text,
        "word_count": len(text.split()),
        "lines": [line.to_dict() for line in lines],
        "details": [word.to_dict() for word in words],
        "metadata": {
            "total_words": len(words),
            "total_lines": len(lines),
            "timestamp": _timestamp(),
            "mode": mode,
        },
    }


async def detect_text(
    *,
    provider: OcrProvider,
    image_bytes: bytes,
    line_threshold: Optional[float] = None,
) -> Dict[str, Any]:
    logger.info(f"======== [开始] 1. 文字识别 | 模式: {provider.mode} | 大小: {len(image_bytes)} 字节 ========")
    annotations = await provider.recognize_words(image_bytes)
    if not annotations:
        logger.warning("======== [完成] 1. 文字识别 | 未检测到任何文字 ========")
        return no_text_result()
    logger.info(f"======== [完成] 1. 文字识别 | 返回 {len(annotations)} 个标注 ========")

    result = build_text_result(annotations, line_threshold=line_threshold, mode=provider.mode)
    logger.info(
        f"======== [完成] 2. 行重组 | {len(result['details'])} 个词, "
        f"{len(result['lines'])} 行 ========"
    )
    return result


async def detect_text_from_url(
    *,
    provider: OcrProvider,
    image_url: str,
    authorization: Optional[str] = None,
    line_threshold: Optional[float] = None,
) -> Dict[str, Any]:
    image_bytes = await fetch_image(image_url, authorization)
    return await detect_text(provider=provider, image_bytes=image_bytes, line_threshold=line_threshold)


async def detect_text_from_base64(
    *,
    provider: OcrProvider,
    base64_image: str,
    line_threshold: Optional[float] = None,
) -> Dict[str, Any]:
    image_bytes = decode_base64_image(base64_image)
    return await detect_text(provider=provider, image_bytes=image_bytes, line_threshold=line_threshold)


async def detect_document_text(*, provider: OcrProvider, image_bytes: bytes) -> Dict[str, Any]:
    logger.info(f"======== [开始] 文档识别 | 模式: {provider.mode} ========")
    document = await provider.recognize_document(image_bytes)
    if document is None:
        logger.warning("======== [完成] 文档识别 | 未检测到任何文字 ========")
        return {"success": False, "message": "未在文档中找到文字。", "text": "", "pages": []}

    pages: List[Dict[str, Any]] = [page.to_dict() for page in document.pages]
    logger.info(f"======== [完成] 文档识别 | {len(pages)} 页 ========")
    return {
        "success": True,
        "message": "文档识别成功。",
        "text": document.text.strip(),
        "pages": pages,
        "metadata": {"total_pages": len(pages), "timestamp": _timestamp()},
    }

