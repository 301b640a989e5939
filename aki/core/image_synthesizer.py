"""Image-to-image synthesis component."""

from PIL import Image

from ..providers.stepfun import StepFunClient
from ..models.schemas import GeneratedImage
from ..utils.config import SynthesisConfig
from ..utils.errors import MalformedResponseError
from ..utils.images import (
    DECODE_ERRORS,
    base64_to_bytes,
    decode_image,
    resize_if_needed,
    to_jpeg_data_uri,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ImageSynthesizer:
    """Generates an image from a source photo and a prompt."""

    def __init__(self, stepfun_client: StepFunClient, settings: SynthesisConfig = None):
        """
        Initialize image synthesizer.

        Args:
            stepfun_client: Image-to-image API client
            settings: Resize and encoding parameters
        """
        self.client = stepfun_client
        self.settings = settings or SynthesisConfig()

    def prepare_source(self, source_image: Image.Image) -> str:
        """
        Downscale if needed and encode as a JPEG data URI.

        Raises:
            ImageConversionError: If encoding fails
        """
        image = resize_if_needed(source_image, self.settings.max_dimension)
        data_uri = to_jpeg_data_uri(image, self.settings.jpeg_quality)

        # Rough decoded size of the base64 payload
        encoded_mb = len(data_uri) * 3 / 4 / (1024 * 1024)
        if encoded_mb > self.settings.max_encoded_mb:
            logger.warning(
                f"Encoded source is {encoded_mb:.2f}MB, above {self.settings.max_encoded_mb}MB",
                extra={"encoded_mb": encoded_mb, "width": image.size[0], "height": image.size[1]}
            )

        return data_uri

    async def synthesize(self, source_image: Image.Image, prompt: str) -> GeneratedImage:
        """
        Submit a source image and prompt and decode the generated image.

        Args:
            source_image: Photo to transform
            prompt: Text prompt (enhanced or user-authored)

        Returns:
            GeneratedImage

        Raises:
            ImageConversionError: Source could not be encoded; no request sent
            InvalidRequestError: Request could not be serialized; no request sent
            TransportError: Network failure
            MalformedResponseError: Unexpected response shape or undecodable image
        """
        model_name = self.client.model

        logger.info(
            f"Synthesizing image with {model_name}",
            extra={
                "model": model_name,
                "source_width": source_image.size[0],
                "source_height": source_image.size[1],
            }
        )

        source_url = self.prepare_source(source_image)

        try:
            b64 = await self.client.image_to_image(prompt, source_url)
        except Exception as e:
            logger.error(
                f"Synthesis failed for {model_name}",
                extra={"model": model_name, "error": str(e), "error_type": type(e).__name__}
            )
            raise

        try:
            image_bytes = base64_to_bytes(b64)
            image = decode_image(image_bytes)
        except DECODE_ERRORS as e:
            logger.error(
                "Generated image could not be decoded",
                extra={"model": model_name, "error": str(e)}
            )
            raise MalformedResponseError(self.client.provider_name, f"undecodable image: {e}")

        logger.info(
            "🎉 Image generated successfully!",
            extra={
                "model": model_name,
                "width": image.size[0],
                "height": image.size[1],
                "size_kb": len(image_bytes) / 1024,
            }
        )

        return GeneratedImage(
            model_name=model_name,
            image=image,
            image_bytes=image_bytes,
            prompt_used=prompt,
        )
