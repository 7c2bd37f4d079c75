# vision_gateway/providers/google_vision.py
import logging
from typing import Any, List, Optional, Sequence

from fastapi.concurrency import run_in_threadpool
from google.api_core.client_options import ClientOptions
from google.cloud import vision

from ..core.exceptions import ProviderError
from .base import DocumentAnnotation, OcrProvider, PageSummary

logger = logging.getLogger(__name__)


def create_vision_client(
    *,
    api_key: Optional[str] = None,
    credentials_file: Optional[str] = None,
    project_id: Optional[str] = None,
    endpoint: Optional[str] = None,
) -> vision.ImageAnnotatorClient:
    """
    按优先级创建 Vision 客户端：API Key 优先，其次是 Service Account JSON 文件。
    """
    if api_key:
        options = ClientOptions(api_key=api_key, quota_project_id=project_id, api_endpoint=endpoint)
        logger.info("使用 API Key 初始化 Google Cloud Vision 客户端")
        return vision.ImageAnnotatorClient(client_options=options)

    if credentials_file:
        options = ClientOptions(quota_project_id=project_id, api_endpoint=endpoint)
        logger.info(f"使用 Service Account 文件初始化 Google Cloud Vision 客户端: '{credentials_file}'")
        return vision.ImageAnnotatorClient.from_service_account_file(credentials_file, client_options=options)

    raise ValueError("需要提供 api_key 或 credentials_file 之一。")


class GoogleVisionProvider(OcrProvider):
    mode = "live"

    def __init__(self, client: vision.ImageAnnotatorClient, language_hints: Optional[List[str]] = None):
        self._client = client
        self._language_hints = language_hints or []

    def _request_kwargs(self) -> dict:
        if not self._language_hints:
            return {}
        return {"image_context": {"language_hints": self._language_hints}}

    @staticmethod
    def _check_response(response: Any) -> None:
        if response.error and response.error.message:
            raise ProviderError(f"Vision API 错误: {response.error.message}")

    async def recognize_words(self, image_bytes: bytes) -> Sequence[Any]:
        image = vision.Image(content=image_bytes)
        try:
            response = await run_in_threadpool(
                self._client.text_detection, image=image, **self._request_kwargs()
            )
        except Exception as e:
            logger.error(f"调用 Vision text_detection 失败: {e}", exc_info=True)
            raise ProviderError(str(e)) from e

        self._check_response(response)
        return list(response.text_annotations)

    async def recognize_document(self, image_bytes: bytes) -> Optional[DocumentAnnotation]:
        image = vision.Image(content=image_bytes)
        try:
            response = await run_in_threadpool(
                self._client.document_text_detection, image=image, **self._request_kwargs()
            )
        except Exception as e:
            logger.error(f"调用 Vision document_text_detection 失败: {e}", exc_info=True)
            raise ProviderError(str(e)) from e

        self._check_response(response)
        annotation = response.full_text_annotation
        if not annotation or not annotation.text:
            return None

        pages = [
            PageSummary(
                width=page.width,
                height=page.height,
                blocks=len(page.blocks),
                confidence=page.confidence or 0.0,
            )
            for page in annotation.pages
        ]
        return DocumentAnnotation(text=annotation.text, pages=pages)
