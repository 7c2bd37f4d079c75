# vision_gateway/api/v1/ocr.py
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, Optional

from fastapi import APIRouter, Depends, File, Header, HTTPException, Query, Request, UploadFile

from ...core.config import settings
from ...core.exceptions import ImageSourceError, ProviderError
from ...providers.base import OcrProvider
from ...schemas.ocr import (
    ApiInfo,
    Base64Request,
    DocumentResponse,
    FileInfo,
    InputInfo,
    OCRResponse,
    UrlRequest,
)
from ...services import ocr_service

router = APIRouter()
logger = logging.getLogger(__name__)


def get_ocr_provider(request: Request) -> OcrProvider:
    # 由 lifespan 在启动时放入 app.state
    return request.app.state.ocr_provider


def _api_info(endpoint: str) -> ApiInfo:
    return ApiInfo(
        endpoint=f"{settings.API_V1_STR}{endpoint}",
        method="POST",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


async def _read_upload(image: UploadFile) -> bytes:
    if not image.content_type or not image.content_type.startswith("image/"):
        raise HTTPException(status_code=415, detail="只允许上传图片文件。")

    limit = settings.MAX_IMAGE_BYTES
    too_large = HTTPException(status_code=413, detail=f"文件过大（最大 {limit // (1024 * 1024)}MB）。")
    if image.size is not None and image.size > limit:
        raise too_large

    # 大小未知时最多多读 1 字节，用来判断是否超限
    contents = await image.read(limit + 1)
    if not contents:
        raise HTTPException(status_code=400, detail="请上传图片文件。")
    if len(contents) > limit:
        raise too_large
    return contents


async def _run(call: Awaitable[Dict[str, Any]], source: str) -> Dict[str, Any]:
    """执行识别流程，并把服务层异常转换为 HTTP 错误。"""
    try:
        return await call
    except ImageSourceError as e:
        logger.warning(f"无法获取图片 ({source}): {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        logger.error(f"OCR 服务调用失败 ({source}): {e}")
        raise HTTPException(status_code=502, detail=f"OCR 服务调用失败: {e}")
    except Exception as e:
        logger.error(f"处理 '{source}' 时发生未知内部错误", exc_info=True)
        raise HTTPException(status_code=500, detail=f"处理图片时发生未知内部错误: {e}")


@router.post("/ocr/text", response_model=OCRResponse, response_model_exclude_none=True)
async def detect_text_from_upload(
    image: UploadFile = File(...),
    line_threshold: Optional[float] = Query(None, gt=0, description="行分组阈值（像素），不传则使用服务端配置。"),
    provider: OcrProvider = Depends(get_ocr_provider),
):
    contents = await _read_upload(image)
    logger.info(f"处理上传图片: {image.filename}")

    result = await _run(
        ocr_service.detect_text(provider=provider, image_bytes=contents, line_threshold=line_threshold),
        source=str(image.filename),
    )
    return OCRResponse(
        **result,
        file=FileInfo(name=str(image.filename), size=len(contents), type=image.content_type),
        api=_api_info("/ocr/text"),
    )


@router.post("/ocr/url", response_model=OCRResponse, response_model_exclude_none=True)
async def detect_text_from_url(
    body: UrlRequest,
    line_threshold: Optional[float] = Query(None, gt=0, description="行分组阈值（像素），不传则使用服务端配置。"),
    authorization: Optional[str] = Header(None),
    provider: OcrProvider = Depends(get_ocr_provider),
):
    logger.info(f"处理图片 URL: {body.image_url}")
    result = await _run(
        ocr_service.detect_text_from_url(
            provider=provider,
            image_url=body.image_url,
            authorization=authorization,
            line_threshold=line_threshold,
        ),
        source=body.image_url,
    )
    return OCRResponse(**result, input=InputInfo(image_url=body.image_url), api=_api_info("/ocr/url"))


@router.post("/ocr/base64", response_model=OCRResponse, response_model_exclude_none=True)
async def detect_text_from_base64(
    body: Base64Request,
    line_threshold: Optional[float] = Query(None, gt=0, description="行分组阈值（像素），不传则使用服务端配置。"),
    provider: OcrProvider = Depends(get_ocr_provider),
):
    logger.info("处理 base64 图片")
    result = await _run(
        ocr_service.detect_text_from_base64(
            provider=provider,
            base64_image=body.base64_image,
            line_threshold=line_threshold,
        ),
        source="base64",
    )
    return OCRResponse(
        **result,
        input=InputInfo(base64_length=len(body.base64_image)),
        api=_api_info("/ocr/base64"),
    )


@router.post("/ocr/document", response_model=DocumentResponse, response_model_exclude_none=True)
async def detect_document_from_upload(
    image: UploadFile = File(...),
    provider: OcrProvider = Depends(get_ocr_provider),
):
    contents = await _read_upload(image)
    logger.info(f"处理上传文档: {image.filename}")

    result = await _run(
        ocr_service.detect_document_text(provider=provider, image_bytes=contents),
        source=str(image.filename),
    )
    return DocumentResponse(
        **result,
        file=FileInfo(name=str(image.filename), size=len(contents), type=image.content_type),
        api=_api_info("/ocr/document"),
    )
