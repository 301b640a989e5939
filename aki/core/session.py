"""Caller-owned generation session.

Holds the state a single-user front end keeps between operations: the busy
flag that disables triggers while a request is outstanding, the last
enhanced prompt, and the last error message to display. Results are handed
to an optional callback on the caller's event loop.
"""

import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Optional
from PIL import Image

from .prompt_enhancer import PromptEnhancer
from .image_synthesizer import ImageSynthesizer
from ..models.enums import Operation, SessionState
from ..models.schemas import GeneratedImage, OperationResult
from ..utils.errors import SessionBusyError
from ..utils.logger import get_logger

logger = get_logger(__name__)

ResultCallback = Callable[[Operation, OperationResult], Any]


class GenerationSession:
    """Single-request-at-a-time driver around the enhancer and synthesizer."""

    def __init__(
        self,
        enhancer: PromptEnhancer,
        synthesizer: ImageSynthesizer,
        on_result: Optional[ResultCallback] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.enhancer = enhancer
        self.synthesizer = synthesizer
        self.on_result = on_result
        self.loop = loop
        self.state = SessionState.IDLE
        self.enhanced_prompt: Optional[str] = None
        self.error_message: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.state is SessionState.IN_FLIGHT

    async def enhance_prompt(self, prompt: str) -> OperationResult[str]:
        if not prompt.strip():
            raise ValueError("Prompt must not be empty")

        result = await self._run(Operation.ENHANCE, partial(self.enhancer.enhance, prompt))
        if result.ok:
            self.enhanced_prompt = result.value
        return result

    async def generate(
        self,
        source_image: Image.Image,
        prompt: str,
    ) -> OperationResult[GeneratedImage]:
        """Synthesize using the enhanced prompt when one exists."""
        effective_prompt = self.enhanced_prompt or prompt
        return await self._run(
            Operation.SYNTHESIZE,
            partial(self.synthesizer.synthesize, source_image, effective_prompt),
        )

    def clear_error(self):
        self.error_message = None

    def reset_prompt(self):
        self.enhanced_prompt = None

    async def _run(
        self,
        operation: Operation,
        start: Callable[[], Awaitable[Any]],
    ) -> OperationResult:
        if self.busy:
            raise SessionBusyError(f"Cannot start {operation.value}: a request is in flight")

        loop = self.loop or asyncio.get_running_loop()
        self.state = SessionState.IN_FLIGHT
        try:
            result = await OperationResult.capture(start())
        finally:
            self.state = SessionState.IDLE

        if not result.ok:
            self.error_message = str(result.error)
            logger.warning(
                f"{operation.value} failed",
                extra={"operation": operation.value, "error_type": type(result.error).__name__}
            )

        if self.on_result is not None:
            loop.call_soon_threadsafe(self.on_result, operation, result)

        return result
