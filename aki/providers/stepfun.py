"""StepFun image-to-image client."""

from typing import Any, Dict, Optional
import httpx

from .base import BaseProvider
from ..utils.logger import get_logger
from ..utils.errors import MalformedResponseError

logger = get_logger(__name__)


class StepFunClient(BaseProvider):
    """Client for the StepFun image2image API."""

    provider_name = "stepfun"

    def __init__(
        self,
        api_key: str,
        endpoint: str = "https://api.stepfun.com/v1/images/image2image",
        model: str = "step-1x-medium",
        seed: int = 42,
        source_weight: float = 0.7,
        response_format: str = "b64_json",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            api_key=api_key,
            endpoint=endpoint,
            timeout=timeout,
            transport=transport,
        )
        self.model = model
        self.seed = seed
        self.source_weight = source_weight
        self.response_format = response_format

    def build_payload(self, prompt: str, source_url: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "prompt": prompt,
            "source_url": source_url,
            "seed": self.seed,
            "source_weight": self.source_weight,
            "response_format": self.response_format,
        }

    async def image_to_image(self, prompt: str, source_url: str) -> str:
        """
        Generate an image from a source image and prompt.

        Args:
            prompt: Text prompt
            source_url: Source image as a data URI

        Returns:
            Base64 payload of the generated image (data[0].b64_json)

        Raises:
            TransportError: Connection-level failure
            MalformedResponseError: Response lacks data[0].b64_json
        """
        logger.info(
            f"🚀 Submitting to StepFun: {self.model}",
            extra={
                "model": self.model,
                "prompt": prompt[:100],
                "source_kb": len(source_url) / 1024,
            }
        )

        data = await self._post_json(self.build_payload(prompt, source_url))

        items = data.get("data")
        if not isinstance(items, list) or not items:
            raise MalformedResponseError(self.provider_name, "missing or empty 'data'")

        first = items[0]
        b64 = first.get("b64_json") if isinstance(first, dict) else None
        if not isinstance(b64, str) or not b64:
            raise MalformedResponseError(self.provider_name, "missing 'b64_json' in first item")

        return b64
