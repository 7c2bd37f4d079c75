# vision_gateway/core/config.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    # --- App Settings ---
    APP_NAME: str = "Vision OCR Gateway"
    API_V1_STR: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # --- OCR Settings ---
    # 行分组阈值（像素），与图片 DPI 相关
    OCR_LINE_THRESHOLD: float = Field(20.0, gt=0)
    # 逗号分隔的语言提示，例如 "th,en"
    OCR_LANG: Optional[str] = None
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024
    IMAGE_FETCH_TIMEOUT: float = 15.0

    # --- Google Cloud Vision (loaded from .env) ---
    GOOGLE_CLOUD_API_KEY: Optional[str] = None
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None
    GOOGLE_CLOUD_PROJECT_ID: Optional[str] = None
    # 可选的区域端点，例如 "eu-vision.googleapis.com"
    VISION_API_ENDPOINT: Optional[str] = None

    @property
    def language_hints(self) -> List[str]:
        if not self.OCR_LANG:
            return []
        return [lang.strip() for lang in self.OCR_LANG.split(",") if lang.strip()]

settings = Settings()
