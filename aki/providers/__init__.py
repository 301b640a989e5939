"""API provider clients for external services."""

from .openai import OpenAIClient
from .stepfun import StepFunClient

__all__ = [
    "OpenAIClient",
    "StepFunClient",
]
