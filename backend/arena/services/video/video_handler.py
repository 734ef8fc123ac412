"""
视频生成处理器
组装结构化关键词并调用 Veo 视频生成
"""

from typing import Dict, List

from fastapi import HTTPException, status

from arena.core.exceptions import ArenaError
from arena.core.log_utils import get_logger
from arena.core.storage import get_optional_storage_service
from arena.core.video.veo import VeoVideoGenerator, VideoPromptKeywords
from arena.schemas.generation import VideoGenerationRequest

logger = get_logger(__name__)


class VideoHandler:
    """视频生成处理器"""

    def __init__(self, generator: VeoVideoGenerator = None):
        self.generator = generator or VeoVideoGenerator(storage=get_optional_storage_service())

    @staticmethod
    def keywords_from_request(request: VideoGenerationRequest) -> VideoPromptKeywords:
        return VideoPromptKeywords(
            subject=request.subject,
            action=request.action,
            scene=request.scene,
            camera_angle=request.camera_angle,
            camera_movement=request.camera_movement,
            lens_effects=request.lens_effects,
            style=request.style,
            temporal_elements=request.temporal_elements,
            sound_effects=request.sound_effects,
            dialogue=request.dialogue,
        )

    async def handle_generate(self, request: VideoGenerationRequest) -> Dict[str, List[str]]:
        """处理视频生成请求"""
        try:
            logger.info(
                "处理视频生成请求",
                operation="generate_video",
                has_prompt=bool(request.prompt),
                has_image=bool(request.image),
                number_of_videos=request.number_of_videos
            )
            urls = await self.generator.generate(
                request.prompt,
                keywords=self.keywords_from_request(request),
                image=request.image,
                enhance=request.enhance,
                number_of_videos=request.number_of_videos
            )
            return {"urls": urls}
        except ArenaError as e:
            logger.warning("视频生成失败", operation="generate_video", error_code=e.code, error=e.message)
            raise HTTPException(status_code=e.status_code, detail=e.message)
        except Exception as e:
            logger.error("视频生成出现未预期异常", exception=e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e) or "Failed to generate"
            )
