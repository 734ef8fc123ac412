"""
腾讯云COS配置模块
由全局配置派生COS连接参数，也支持按请求构建（如迁移到用户自有存储桶）
"""

from typing import Optional
from pydantic import BaseModel, Field

from arena.core.config.config import settings


class COSConfig(BaseModel):
    """COS配置数据类"""

    secret_id: str = Field(default="", description="腾讯云COS SecretId")
    secret_key: str = Field(default="", description="腾讯云COS SecretKey")
    region: str = Field(default="ap-beijing", description="COS地域")
    bucket: str = Field(default="", description="COS存储桶名称")
    scheme: str = Field(default="https", description="连接协议")

    timeout: int = Field(default=30, description="连接超时时间（秒）")
    max_retries: int = Field(default=3, description="最大重试次数")
    retry_delay_base: float = Field(default=1, description="重试基础间隔（秒）")

    images_prefix: str = Field(default="images", description="图片存储前缀")
    videos_prefix: str = Field(default="videos", description="视频存储前缀")

    public_read: bool = Field(default=True, description="上传对象是否公共可读")


def get_cos_config(
    secret_id: Optional[str] = None,
    secret_key: Optional[str] = None,
    bucket: Optional[str] = None,
    region: Optional[str] = None
) -> COSConfig:
    """
    从全局配置获取COS配置，显式传入的参数优先

    Args:
        secret_id: 覆盖的SecretId
        secret_key: 覆盖的SecretKey
        bucket: 覆盖的存储桶
        region: 覆盖的地域

    Returns:
        COSConfig: COS配置
    """
    return COSConfig(
        secret_id=secret_id or settings.cos_secret_id,
        secret_key=secret_key or settings.cos_secret_key,
        region=region or settings.cos_region,
        bucket=bucket or settings.cos_bucket,
        scheme=settings.cos_scheme,
        timeout=settings.cos_timeout,
        max_retries=settings.cos_max_retries,
        retry_delay_base=settings.cos_retry_delay_base,
        images_prefix=settings.cos_images_prefix,
        videos_prefix=settings.cos_videos_prefix,
    )


def validate_cos_config(config: Optional[COSConfig]) -> bool:
    """验证COS配置完整性"""
    if config is None:
        return False

    required_fields = ["secret_id", "secret_key", "bucket"]

    for field in required_fields:
        if not getattr(config, field):
            return False

    return True


def get_cos_endpoint(config: COSConfig) -> str:
    """构建COS端点域名"""
    return f"{config.bucket}.cos.{config.region}.myqcloud.com"


def get_object_url(config: COSConfig, key: str) -> str:
    """构建对象的公共访问URL"""
    return f"{config.scheme}://{get_cos_endpoint(config)}/{key}"
