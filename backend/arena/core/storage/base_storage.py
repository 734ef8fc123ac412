"""
存储抽象基类
定义统一的存储接口，支持多种存储后端
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

from arena.core.storage.models import UploadResult


class BaseStorage(ABC):
    """存储抽象基类"""

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        key: str,
        mime_type: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> UploadResult:
        """
        上传文件并返回公共访问URL

        Args:
            data: 文件数据
            key: 存储键
            mime_type: MIME类型
            metadata: 可选的元数据

        Returns:
            UploadResult: 上传结果

        Raises:
            StorageError: 上传失败时抛出
        """

    @abstractmethod
    def public_url(self, key: str) -> str:
        """
        构建存储键对应的公共访问URL

        Args:
            key: 存储键

        Returns:
            str: 访问URL
        """
