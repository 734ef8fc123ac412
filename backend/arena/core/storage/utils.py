"""
存储工具函数
对象键生成、MIME扩展名推断，以及上传失败时回退为内联数据URL
"""

import base64
import mimetypes
from typing import Optional

from arena.core.exceptions import StorageError
from arena.core.log_messages import log_messages
from arena.core.log_utils import get_logger
from arena.core.storage.base_storage import BaseStorage
from arena.utils.id_utils import generate_random_name

logger = get_logger(__name__)

# mimetypes 对常见图片类型的推断在不同平台上不一致，这里固定下来
_EXTENSION_OVERRIDES = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
}


def extension_for_mime(mime_type: Optional[str], default: str = "png") -> str:
    """根据MIME类型推断文件扩展名"""
    if not mime_type:
        return default
    normalized = mime_type.split(";")[0].strip().lower()
    if normalized in _EXTENSION_OVERRIDES:
        return _EXTENSION_OVERRIDES[normalized]
    guessed = mimetypes.guess_extension(normalized)
    return guessed.lstrip(".") if guessed else default


def build_object_key(prefix: str, mime_type: Optional[str], index: int = 0) -> str:
    """
    生成随机对象键，格式为 {prefix}/{random}.{index}.{ext}

    Args:
        prefix: 存储前缀（如 images）
        mime_type: 内容MIME类型
        index: 同一次生成中的文件序号

    Returns:
        str: 对象键
    """
    return f"{prefix}/{generate_random_name()}.{index}.{extension_for_mime(mime_type)}"


def to_data_url(data: bytes, mime_type: str) -> str:
    """将二进制内容编码为数据URL"""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


async def upload_or_inline(
    storage: Optional[BaseStorage],
    data: bytes,
    mime_type: str,
    prefix: str = "images",
    index: int = 0
) -> str:
    """
    上传二进制内容并返回公共URL；存储不可用或上传失败时返回内联数据URL

    Args:
        storage: 存储服务（None表示未配置）
        data: 文件数据
        mime_type: MIME类型
        prefix: 存储前缀
        index: 文件序号

    Returns:
        str: 存储URL或数据URL
    """
    if storage is None:
        logger.warning(log_messages.STORAGE_UPLOAD_FALLBACK, reason="storage_not_configured")
        return to_data_url(data, mime_type)

    key = build_object_key(prefix, mime_type, index)
    try:
        result = await storage.upload(data, key, mime_type)
    except StorageError as e:
        logger.warning(log_messages.STORAGE_UPLOAD_FALLBACK, key=key, error=str(e))
        return to_data_url(data, mime_type)

    if not result.url:
        logger.warning(log_messages.STORAGE_UPLOAD_FALLBACK, key=key, reason="empty_url")
        return to_data_url(data, mime_type)

    logger.info(log_messages.STORAGE_UPLOAD_SUCCESS, key=key, size=result.size)
    return result.url
