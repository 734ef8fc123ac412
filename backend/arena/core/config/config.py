"""
应用配置管理模块
统一管理所有配置信息，包括环境变量和文件配置
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator, ConfigDict

from arena.utils.config_utils import get_workspace_path, get_config_path, parse_json_config


class Settings(BaseSettings):
    """应用配置类 - 统一管理所有配置信息"""

    # ==================== 基础配置 ====================
    app_name: str = "Image Arena"
    app_version: str = "1.0.0"
    app_debug: bool = False
    app_env: str = "development"

    # ==================== API配置 ====================
    api_v1_str: str = "/api/v1"
    project_name: str = "Image Arena API"

    # ==================== 数据库配置 ====================
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "image_arena_dev"
    POSTGRES_PASSWORD: str = "dev_password"
    POSTGRES_DB: str = "image_arena_dev"
    # 显式指定的异步连接串（测试环境使用 sqlite+aiosqlite）
    DATABASE_URL: Optional[str] = None
    db_echo: bool = False
    db_auto_create: bool = False

    # ==================== 文件存储配置 ====================
    log_dir: str = "log"

    # ==================== 模型供应商密钥 ====================
    OPENAI_API_KEY: str = ""
    GEMINI_API_KEY: str = ""
    BFL_API_KEY: str = ""
    GOOGLE_API_KEY: str = ""

    # ==================== 图片生成配置 ====================
    image_gpt_model: str = "gpt-5"
    image_gpt_size: str = "1024x1024"
    gemini_image_model: str = "gemini-2.5-flash-image-preview"
    flux_endpoint: str = "https://api.bfl.ai/v1/flux-kontext-pro"
    provider_request_timeout: int = 120

    # 提交-轮询型供应商的轮询策略（间隔秒数 x 次数 = 最长等待）
    poll_interval_seconds: float = 0.5
    poll_max_attempts: int = 120

    # ==================== 提示词增强配置 ====================
    prompt_enhancer_model: str = "gemini-2.5-flash"

    # ==================== 视频生成配置 ====================
    veo_model: str = "veo-3.0-generate-preview"
    veo_aspect_ratio: str = "16:9"
    veo_poll_interval_seconds: float = 10.0
    veo_poll_max_attempts: int = 60

    # ==================== 配额配置 ====================
    generation_quota_limit: int = 10

    # ==================== COS存储配置 ====================
    cos_secret_id: str = ""
    cos_secret_key: str = ""
    cos_region: str = "ap-beijing"
    cos_bucket: str = ""
    cos_scheme: str = "https"

    cos_timeout: int = 30

    cos_images_prefix: str = "images"
    cos_videos_prefix: str = "videos"

    # ==================== 重试配置 ====================
    cos_retry_delay_base: float = 1
    cos_max_retries: int = 3

    # ==================== MLflow配置 ====================
    enable_mlflow: bool = False
    mlflow_tracking_uri: str = "http://localhost:5001"
    mlflow_experiment_name: str = "image-arena-experiment"

    # ==================== 日志配置 ====================
    log_level: str = "INFO"
    log_file: str = "backend.log"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ==================== 应用服务配置 ====================
    app_port: int = 8080
    app_host: str = "0.0.0.0"

    # ==================== CORS配置 ====================
    cors_origins: str = '["http://localhost:3000", "http://127.0.0.1:3000"]'

    # ==================== 验证器 ====================
    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str) -> List[str]:
        """解析CORS origins配置"""
        return parse_json_config(value)

    @field_validator("poll_max_attempts", "veo_poll_max_attempts", "generation_quota_limit")
    @classmethod
    def ensure_positive(cls, value: int) -> int:
        """确保计数类配置为正整数"""
        if value <= 0:
            raise ValueError("配置值必须为正整数")
        return value

    # ==================== 计算属性 ====================
    @property
    def async_database_url(self) -> str:
        """构建异步数据库连接URL"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def workspace_dir(self) -> str:
        """获取workspace目录路径"""
        return str(get_workspace_path())

    @property
    def absolute_log_dir(self) -> str:
        """获取绝对日志目录路径"""
        return str(get_workspace_path(self.log_dir))

    @property
    def cos_enabled(self) -> bool:
        """检查COS是否启用"""
        return bool(self.cos_secret_id and self.cos_secret_key and self.cos_bucket)

    model_config = ConfigDict(
        env_file=get_config_path(".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        validate_default=True
    )


def get_settings() -> Settings:
    """获取应用配置实例"""
    # 环境变量由外部环境控制（Docker Compose、测试conftest等）
    return Settings()


# 全局配置实例
settings = get_settings()
