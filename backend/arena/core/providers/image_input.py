"""
输入图片归一化
将远程URL、数据URL或裸base64字符串统一转换为 字节 + MIME类型
"""

import base64
import binascii
import mimetypes
from typing import Optional
from urllib.parse import urlparse

import httpx

from arena.core.exceptions import ValidationError
from arena.core.log_utils import get_logger
from arena.core.providers.models import InputImage

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "image/png"
FETCH_TIMEOUT = 30


def is_remote_url(value: Optional[str]) -> bool:
    """判断是否为 http(s) 远程地址"""
    return bool(value) and value.lower().startswith(("http://", "https://"))


def _guess_mime_from_url(url: str) -> Optional[str]:
    guessed, _ = mimetypes.guess_type(urlparse(url).path)
    return guessed


def _decode_base64(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Invalid base64 image data: {e}") from e


def decode_data_url(value: str) -> InputImage:
    """
    解码数据URL（data:<mime>;base64,<payload>）

    Raises:
        ValidationError: 数据URL格式无效时抛出
    """
    header, _, payload = value.partition(",")
    mime_type = header[len("data:"):].split(";")[0].strip() or DEFAULT_MIME_TYPE
    if not payload:
        raise ValidationError("Invalid data URL: missing payload")
    return InputImage(data=_decode_base64(payload), mime_type=mime_type)


async def fetch_remote_image(url: str, client: Optional[httpx.AsyncClient] = None) -> InputImage:
    """
    下载远程图片，MIME类型优先取响应头，其次按URL路径推断

    Raises:
        ValidationError: 下载失败时抛出
    """
    owns_client = client is None
    http_client = client or httpx.AsyncClient(timeout=FETCH_TIMEOUT, follow_redirects=True)
    try:
        response = await http_client.get(url)
    except httpx.HTTPError as e:
        raise ValidationError(f"Failed to fetch image URL: {e}") from e
    finally:
        if owns_client:
            await http_client.aclose()

    if response.status_code >= 400:
        raise ValidationError(f"Failed to fetch image URL: {response.status_code}")

    content_type = response.headers.get("content-type")
    mime_type = (content_type.split(";")[0].strip() if content_type else None) \
        or _guess_mime_from_url(url) or DEFAULT_MIME_TYPE

    logger.debug("已下载输入图片", url=url[:100], mime_type=mime_type, size=len(response.content))
    return InputImage(data=response.content, mime_type=mime_type)


async def normalize_input_image(
    value: Optional[str],
    client: Optional[httpx.AsyncClient] = None
) -> Optional[InputImage]:
    """
    归一化输入图片

    Args:
        value: 远程URL、数据URL或裸base64字符串；为空时返回None
        client: 可选的httpx客户端（用于下载远程图片）

    Returns:
        Optional[InputImage]: 归一化后的图片
    """
    if not value:
        return None
    value = value.strip()
    if is_remote_url(value):
        return await fetch_remote_image(value, client)
    if value.startswith("data:"):
        return decode_data_url(value)
    return InputImage(data=_decode_base64(value), mime_type=DEFAULT_MIME_TYPE)
