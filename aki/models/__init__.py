"""Data models and schemas for the image studio."""

from .schemas import (
    GeneratedImage,
    OperationResult,
    EnhanceRequest,
    EnhanceResponse,
    SynthesizeRequest,
    SynthesizeResponse,
    ErrorResponse,
)
from .enums import (
    CredentialSource,
    SessionState,
    Operation,
)

__all__ = [
    "GeneratedImage",
    "OperationResult",
    "EnhanceRequest",
    "EnhanceResponse",
    "SynthesizeRequest",
    "SynthesizeResponse",
    "ErrorResponse",
    "CredentialSource",
    "SessionState",
    "Operation",
]
