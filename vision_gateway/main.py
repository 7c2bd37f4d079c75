# vision_gateway/main.py
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .api.v1 import ocr
from .services import ocr_service

ENDPOINTS = {
    "GET /": "API 信息",
    f"POST {settings.API_V1_STR}/ocr/text": "上传图片识别文字",
    f"POST {settings.API_V1_STR}/ocr/url": "通过图片 URL 识别文字",
    f"POST {settings.API_V1_STR}/ocr/base64": "通过 base64 图片识别文字",
    f"POST {settings.API_V1_STR}/ocr/document": "上传文档进行文档模式识别",
    "GET /health": "健康检查",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    在应用启动时创建 OCR 服务客户端，在应用关闭时清理。
    """
    app.state.started_at = time.monotonic()
    app.state.ocr_provider = ocr_service.load_ocr_provider()
    logging.info(f"OCR 服务已就绪，模式: {app.state.ocr_provider.mode}")

    yield

    app.state.ocr_provider = None
    logging.info("OCR 服务已清理。")


app = FastAPI(
    title=settings.APP_NAME,
    description="一个使用 FastAPI 和 Google Cloud Vision 的文字识别 API 网关",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 挂载 v1 版本的路由
app.include_router(ocr.router, prefix=settings.API_V1_STR, tags=["OCR"])


@app.get("/", tags=["Root"])
def read_root():
    return {
        "service": settings.APP_NAME,
        "version": app.version,
        "endpoints": ENDPOINTS,
        "status": "running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health", tags=["Root"])
def health(request: Request):
    started_at = getattr(request.app.state, "started_at", None)
    provider = getattr(request.app.state, "ocr_provider", None)
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "mode": provider.mode if provider else None,
        "uptime": time.monotonic() - started_at if started_at is not None else 0.0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
