"""Core business logic components."""

from .credentials import CredentialResolver
from .prompt_enhancer import PromptEnhancer
from .image_synthesizer import ImageSynthesizer
from .session import GenerationSession

__all__ = [
    "CredentialResolver",
    "PromptEnhancer",
    "ImageSynthesizer",
    "GenerationSession",
]
