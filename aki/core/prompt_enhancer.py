"""Prompt enhancement component."""

from ..providers.openai import OpenAIClient
from ..utils.logger import get_logger

logger = get_logger(__name__)


class PromptEnhancer:
    """Enhances user prompts for image generation."""

    def __init__(self, openai_client: OpenAIClient):
        """
        Initialize prompt enhancer.

        Args:
            openai_client: Chat-completion API client
        """
        self.client = openai_client

    async def enhance(self, prompt: str) -> str:
        """
        Enhance a prompt with visual detail, style, lighting and composition.

        Args:
            prompt: User's original prompt

        Returns:
            Enhanced prompt

        Raises:
            TransportError: Network failure
            MalformedResponseError: Unexpected response shape
        """
        logger.info(
            "Enhancing prompt",
            extra={"model": self.client.model, "original_prompt": prompt[:100]}
        )

        try:
            enhanced = await self.client.enhance_prompt(prompt)
        except Exception as e:
            logger.error(
                "Enhancement failed",
                extra={"model": self.client.model, "error": str(e), "error_type": type(e).__name__}
            )
            raise

        logger.info(
            "🎨 ENHANCED PROMPT",
            extra={
                "model": self.client.model,
                "original_prompt": prompt[:100],
                "enhanced_prompt": enhanced[:100],
            }
        )

        return enhanced
