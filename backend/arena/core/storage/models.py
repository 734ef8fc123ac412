"""
存储服务数据模型
定义存储操作中使用的数据结构
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class UploadResult:
    """
    上传结果

    Attributes:
        key: 存储键
        url: 公共访问URL
        size: 文件大小（字节）
        mime_type: MIME类型
        bucket: 存储桶名称
        region: 区域
        etag: 文件ETag
        uploaded_at: 上传时间
    """
    key: str
    url: str
    size: int
    mime_type: str
    bucket: Optional[str] = None
    region: Optional[str] = None
    etag: Optional[str] = None
    uploaded_at: Optional[datetime] = None


__all__ = [
    'UploadResult',
]
