"""
视频生成API端点
"""

from typing import Dict, List

from fastapi import APIRouter, Depends

from arena.api.deps import get_video_handler
from arena.schemas.generation import VideoGenerationRequest, VideoGenerationResponse
from arena.services.video.video_handler import VideoHandler

router = APIRouter(tags=["视频生成"])


@router.post(
    "/veo3",
    response_model=VideoGenerationResponse,
    summary="Veo视频生成",
    description="根据提示词或结构化关键词生成视频，完成后返回存储URL列表"
)
async def generate_video(
    video_request: VideoGenerationRequest,
    handler: VideoHandler = Depends(get_video_handler)
) -> Dict[str, List[str]]:
    return await handler.handle_generate(video_request)
