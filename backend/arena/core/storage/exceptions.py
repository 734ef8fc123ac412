"""
存储服务异常定义
定义存储模块中使用的异常类型
"""

from typing import Any, Dict, Optional

from arena.core.exceptions import StorageError


class UploadError(StorageError):
    """文件上传错误"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="UPLOAD_ERROR", details=details)


class NetworkError(StorageError):
    """网络请求错误（如下载源文件失败）"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, code="NETWORK_ERROR", details=details)
        self.http_status = status_code


__all__ = [
    'StorageError',
    'UploadError',
    'NetworkError',
]
