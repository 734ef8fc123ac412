"""
生成相关的Pydantic模型
请求与响应字段使用 camelCase 别名，与前端约定保持一致
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from arena.core.providers.models import ProviderId, ProviderOutcome
from arena.services.generation.conversation import DEFAULT_PROVIDERS


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateRequest(CamelModel):
    """单供应商生成请求"""
    prompt: Optional[str] = None
    image: Optional[str] = None
    enhance: bool = False


class CompareRequest(GenerateRequest):
    """多供应商对比请求"""
    providers: List[str] = Field(default_factory=lambda: [p.value for p in DEFAULT_PROVIDERS])


class UsageSchema(CamelModel):
    input_tokens: Optional[int] = Field(None, alias="inputTokens")
    output_tokens: Optional[int] = Field(None, alias="outputTokens")
    total_tokens: Optional[int] = Field(None, alias="totalTokens")


class GenerateResponse(CamelModel):
    """单供应商生成成功响应"""
    success: bool = True
    image: Optional[str] = None
    text: Optional[str] = None
    tokens: Optional[int] = None
    usage: Optional[UsageSchema] = None

    @classmethod
    def from_outcome(cls, outcome: ProviderOutcome) -> "GenerateResponse":
        usage = None
        if outcome.usage is not None:
            usage = UsageSchema(
                input_tokens=outcome.usage.input_tokens,
                output_tokens=outcome.usage.output_tokens,
                total_tokens=outcome.usage.total_tokens,
            )
        return cls(image=outcome.image_url, text=outcome.text, tokens=outcome.tokens_used, usage=usage)

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class OutcomeSchema(CamelModel):
    """SSE事件中的分支结果"""
    provider_id: ProviderId = Field(alias="providerId")
    kind: str
    image_url: Optional[str] = Field(None, alias="imageUrl")
    text: Optional[str] = None
    tokens_used: Optional[int] = Field(None, alias="tokensUsed")
    duration_ms: int = Field(0, alias="durationMs")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    error_code: Optional[str] = Field(None, alias="errorCode")
    usage: Optional[UsageSchema] = None

    @classmethod
    def from_outcome(cls, outcome: ProviderOutcome) -> "OutcomeSchema":
        return cls(
            provider_id=outcome.provider_id,
            kind=outcome.kind.value,
            image_url=outcome.image_url,
            text=outcome.text,
            tokens_used=outcome.tokens_used,
            duration_ms=outcome.duration_ms,
            error_message=outcome.error_message,
            error_code=outcome.error_code,
            usage=GenerateResponse.from_outcome(outcome).usage,
        )


class ImageListResponse(CamelModel):
    """用户已生成图片列表"""
    urls: List[str]
    count: int
    limit_reached: bool = Field(alias="limitReached")


class MigrateImagesRequest(CamelModel):
    """迁移到用户自有存储桶的请求（缺少字段时由服务层返回400）"""
    bucket: Optional[str] = None
    secret_id: Optional[str] = Field(None, alias="secretId")
    secret_key: Optional[str] = Field(None, alias="secretKey")
    region: Optional[str] = None


class MigrateImagesResponse(CamelModel):
    migrated: int
    success: Optional[bool] = None
    message: Optional[str] = None


class PromptEnhanceRequest(CamelModel):
    text: Optional[str] = None


class PromptEnhanceResponse(CamelModel):
    prompt: str


class VideoGenerationRequest(CamelModel):
    """视频生成请求：自由提示词或结构化关键词"""
    prompt: Optional[str] = None
    image: Optional[str] = None
    enhance: bool = False
    number_of_videos: int = Field(1, alias="numberOfVideos", ge=1, le=4)

    subject: Optional[str] = None
    action: Optional[str] = None
    scene: Optional[str] = None
    camera_angle: Optional[str] = None
    camera_movement: Optional[str] = None
    lens_effects: Optional[str] = None
    style: Optional[str] = None
    temporal_elements: Optional[str] = None
    sound_effects: Optional[str] = None
    dialogue: Optional[str] = None


class VideoGenerationResponse(CamelModel):
    urls: List[str]
