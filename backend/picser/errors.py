"""
错误类型：每种错误对应一个 HTTP 状态码，由 main 中的异常处理器统一转成 {"error": ...}
"""
from typing import Any, Optional


class PicserError(Exception):
    status_code = 500

    def __init__(self, message: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class ValidationError(PicserError):
    """请求本身有问题（类型、大小、缺字段），客户端修正后再试"""
    status_code = 400


class InvalidType(ValidationError):
    pass


class TooLarge(ValidationError):
    pass


class MissingField(ValidationError):
    pass


class AuthError(PicserError):
    """GitHub token 无效或过期"""
    status_code = 401


class NotFoundError(PicserError):
    """仓库或分支不存在，或 token 无权访问"""
    status_code = 404


class UpstreamError(PicserError):
    """GitHub 返回的其他错误，原始信息保存在 upstream_message"""
    status_code = 500

    def __init__(self, message: str, upstream_message: str = "", extra: Optional[dict[str, Any]] = None):
        super().__init__(message, extra=extra)
        self.upstream_message = upstream_message


class ConfigurationError(PicserError):
    status_code = 500
