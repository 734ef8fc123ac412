"""
业务异常定义
统一的错误分类：配置错误、上游错误、超时、参数校验、配额超限、存储错误

每种异常带有错误码与对应的HTTP状态码，由处理器层统一转换为 {"error": ...} 响应。
"""

from typing import Any, Dict, Optional


class ArenaError(Exception):
    """
    业务异常基类

    Attributes:
        message: 错误消息
        code: 错误码
        details: 错误详情
        status_code: 对应的HTTP状态码
    """

    default_code: str = "INTERNAL_ERROR"
    default_status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.status_code = status_code or self.default_status_code

    def __str__(self) -> str:
        return self.message


class ConfigurationError(ArenaError):
    """配置错误（如缺少供应商密钥），不可重试"""

    default_code = "CONFIG_ERROR"
    default_status_code = 500


class UpstreamError(ArenaError):
    """上游供应商错误（非2xx、响应格式异常）"""

    default_code = "UPSTREAM_ERROR"
    default_status_code = 502


class GenerationTimeoutError(UpstreamError):
    """轮询次数耗尽仍未到达终态"""

    default_code = "TIMEOUT"
    default_status_code = 504


class EmptyResultError(UpstreamError):
    """供应商既未返回图片也未返回文本"""

    default_code = "EMPTY_RESULT"
    default_status_code = 500

    def __init__(self, message: str = "No image or text was generated", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ValidationError(ArenaError):
    """请求参数校验失败（未选择供应商、空提示词等）"""

    default_code = "VALIDATION_ERROR"
    default_status_code = 400


class QuotaExceededError(ArenaError):
    """用户生成次数已达上限"""

    default_code = "QUOTA_EXCEEDED"
    default_status_code = 429

    def __init__(self, limit: int, count: Optional[int] = None) -> None:
        super().__init__(
            f"Generation limit reached: at most {limit} completed generations are allowed",
            details={"limit": limit, "count": count}
        )
        self.limit = limit
        self.count = count


class AuthenticationError(ArenaError):
    """未登录或无法识别当前用户"""

    default_code = "UNAUTHORIZED"
    default_status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class StorageError(ArenaError):
    """存储操作异常，调用方需要提供回退逻辑"""

    default_code = "STORAGE_ERROR"
    default_status_code = 500


# 分支失败结果只携带错误码，HTTP边界据此还原状态码
STATUS_BY_CODE: Dict[str, int] = {
    ConfigurationError.default_code: 500,
    UpstreamError.default_code: 502,
    GenerationTimeoutError.default_code: 504,
    EmptyResultError.default_code: 500,
    ValidationError.default_code: 400,
    QuotaExceededError.default_code: 429,
    AuthenticationError.default_code: 401,
    StorageError.default_code: 500,
    "GENERATION_FAILED": 500,
}


def status_for_code(code: Optional[str]) -> int:
    """根据错误码获取HTTP状态码，未知错误码按上游错误处理"""
    return STATUS_BY_CODE.get(code or "", UpstreamError.default_status_code)


__all__ = [
    'ArenaError',
    'ConfigurationError',
    'UpstreamError',
    'GenerationTimeoutError',
    'EmptyResultError',
    'ValidationError',
    'QuotaExceededError',
    'AuthenticationError',
    'StorageError',
    'STATUS_BY_CODE',
    'status_for_code',
]
