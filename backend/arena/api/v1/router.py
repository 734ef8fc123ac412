"""
API路由聚合模块
将所有v1版本的路由统一注册，前缀统一在此管理
"""

from fastapi import APIRouter

from arena.api.v1.endpoints import generation, images, prompt, video

api_router = APIRouter()

# ==================== 图片生成路由 ====================
api_router.include_router(generation.router, prefix="/generate", tags=["图片生成"])

# ==================== 图片库路由 ====================
api_router.include_router(images.router, prefix="/images", tags=["图片库"])

# ==================== 提示词路由 ====================
api_router.include_router(prompt.router, prefix="/prompt", tags=["提示词"])

# ==================== 视频生成路由 ====================
api_router.include_router(video.router, prefix="/video", tags=["视频生成"])
