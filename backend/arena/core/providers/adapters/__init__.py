"""
供应商适配器实现
"""

from .image_gpt import ImageGptProvider
from .gemini_flash import GeminiFlashProvider
from .flux import FluxProvider

__all__ = [
    "ImageGptProvider",
    "GeminiFlashProvider",
    "FluxProvider",
]
