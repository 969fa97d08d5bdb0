"""
External capabilities used by the leads pipeline.
"""

from .text_generation import (
    OpenAITextGenerator,
    TextGenerationError,
    TextGenerator,
    get_text_generator,
)

__all__ = [
    "OpenAITextGenerator",
    "TextGenerationError",
    "TextGenerator",
    "get_text_generator",
]
