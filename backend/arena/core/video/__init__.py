"""
视频生成模块
"""

from .veo import VeoVideoGenerator, VideoPromptKeywords

__all__ = [
    "VeoVideoGenerator",
    "VideoPromptKeywords",
]
