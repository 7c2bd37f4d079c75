# vision_gateway/services/image_source.py
import base64
import binascii
import logging
import re
from typing import Optional

import httpx

from ..core.config import settings
from ..core.exceptions import ImageSourceError

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)


async def fetch_image(
    url: str,
    authorization: Optional[str] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> bytes:
    """
    下载 URL 指向的图片。如果调用方带了 Authorization 头，原样转发给图片服务器。
    只请求一次，不做重试。响应体按块读取，超过 MAX_IMAGE_BYTES 立即中止。
    """
    headers = {"Authorization": authorization} if authorization else {}
    limit = settings.MAX_IMAGE_BYTES
    logger.info(f"正在下载图片: {url}")

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.IMAGE_FETCH_TIMEOUT, follow_redirects=True)
    try:
        async with client.stream("GET", url, headers=headers) as response:
            if not response.is_success:
                raise ImageSourceError(f"无法下载图片: HTTP {response.status_code}")

            declared = response.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > limit:
                raise ImageSourceError(f"图片过大（最大 {limit} 字节）。")

            chunks = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > limit:
                    raise ImageSourceError(f"图片过大（最大 {limit} 字节）。")
                chunks.append(chunk)
    except httpx.HTTPError as e:
        logger.error(f"下载图片失败 '{url}': {e}")
        raise ImageSourceError(f"无法下载图片: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    content = b"".join(chunks)
    if not content:
        raise ImageSourceError("下载的图片内容为空。")
    return content


def decode_base64_image(data: str) -> bytes:
    """解码 base64 图片，允许带 `data:image/png;base64,` 前缀。"""
    payload = _DATA_URL_PREFIX.sub("", data.strip(), count=1)
    payload = "".join(payload.split())
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageSourceError(f"base64 数据无效: {e}") from e

    if not image_bytes:
        raise ImageSourceError("base64 图片内容为空。")
    if len(image_bytes) > settings.MAX_IMAGE_BYTES:
        raise ImageSourceError(f"图片过大（最大 {settings.MAX_IMAGE_BYTES} 字节）。")
    return image_bytes
