"""Pydantic schemas for data validation."""

from typing import Awaitable, Generic, Optional, TypeVar
from datetime import datetime, timezone
from PIL import Image
from pydantic import BaseModel, Field, model_validator

from ..utils.errors import AkiError

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeneratedImage(BaseModel):
    """Result of image synthesis."""
    model_name: str
    image: Image.Image
    image_bytes: bytes
    prompt_used: str
    timestamp: datetime = Field(default_factory=_utcnow)

    class Config:
        arbitrary_types_allowed = True
        protected_namespaces = ()

    @property
    def width(self) -> int:
        return self.image.size[0]

    @property
    def height(self) -> int:
        return self.image.size[1]


class OperationResult(BaseModel, Generic[T]):
    """Either a value or a classified error, never both."""
    value: Optional[T] = None
    error: Optional[AkiError] = None

    class Config:
        arbitrary_types_allowed = True

    @model_validator(mode="after")
    def check_exactly_one_outcome(self):
        if (self.value is None) == (self.error is None):
            raise ValueError("OperationResult needs exactly one of value or error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AkiError) -> "OperationResult[T]":
        return cls(error=error)

    @classmethod
    async def capture(cls, awaitable: Awaitable[T]) -> "OperationResult[T]":
        """Await a studio operation and classify its outcome."""
        try:
            return cls.success(await awaitable)
        except AkiError as e:
            return cls.failure(e)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


class EnhanceRequest(BaseModel):
    """Body of POST /images/enhance."""
    prompt: str = Field(..., min_length=1)


class EnhanceResponse(BaseModel):
    original: str
    enhanced: str


class SynthesizeRequest(BaseModel):
    """Body of POST /images/synthesize."""
    prompt: str = Field(..., min_length=1)
    image: str = Field(..., description="Base64 image or data URI")


class SynthesizeResponse(BaseModel):
    image: str
    width: int
    height: int
    model: str
    prompt: str


class ErrorResponse(BaseModel):
    error: str
    detail: str
