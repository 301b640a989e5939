"""OpenAI chat-completion client used for prompt enhancement."""

from typing import Any, Dict, Optional
import httpx

from .base import BaseProvider
from ..utils.logger import get_logger
from ..utils.errors import MalformedResponseError

logger = get_logger(__name__)

ENHANCEMENT_SYSTEM_PROMPT = """You are an expert at writing image generation prompts.
Enhance the given prompt to be more detailed and effective for image generation.
Focus on adding:
- Visual details
- Style descriptions
- Lighting and atmosphere
- Composition elements
Return only the enhanced prompt without any explanations."""


class OpenAIClient(BaseProvider):
    """Client for the OpenAI chat-completions API."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        endpoint: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-4",
        temperature: float = 0.7,
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
        self.temperature = temperature

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": ENHANCEMENT_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
        }

    async def enhance_prompt(self, prompt: str) -> str:
        """
        Rewrite a prompt with more visual detail.

        Args:
            prompt: User-authored prompt

        Returns:
            Enhanced prompt, whitespace trimmed

        Raises:
            TransportError: Connection-level failure
            MalformedResponseError: Response lacks choices[0].message.content
        """
        data = await self._post_json(self.build_payload(prompt))
        enhanced = self._extract_content(data)

        logger.info(
            "Enhancement complete",
            extra={
                "model_requested": self.model,
                "model_actual": data.get("model", "unknown"),
                "enhanced_length": len(enhanced),
            }
        )

        return enhanced

    def _extract_content(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise MalformedResponseError(self.provider_name, "missing or empty 'choices'")

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise MalformedResponseError(self.provider_name, "missing 'message.content' in first choice")

        return content.strip()
