# vision_gateway/core/exceptions.py


class GatewayError(Exception):
    """网关内部错误的基类。"""


class ImageSourceError(GatewayError):
    """图片无法获取或解码（URL 下载失败、base64 非法、文件过大）。"""


class ProviderError(GatewayError):
    """外部 OCR 服务调用失败（网络、认证、配额等）。"""
