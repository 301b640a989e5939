"""Prompt enhancement and image synthesis endpoints."""

from fastapi import APIRouter, HTTPException, Request

from ..core import ImageSynthesizer, PromptEnhancer
from ..models.schemas import (
    EnhanceRequest,
    EnhanceResponse,
    SynthesizeRequest,
    SynthesizeResponse,
)
from ..utils.images import bytes_to_base64, decode_base64_image
from ..utils.logger import get_logger

logger = get_logger(__name__)

enhance_router = APIRouter()
synthesize_router = APIRouter()


@enhance_router.post("/enhance", response_model=EnhanceResponse)
async def enhance_prompt(body: EnhanceRequest, request: Request):
    """Rewrite a prompt with more visual detail."""
    enhancer: PromptEnhancer = request.app.state.enhancer
    enhanced = await enhancer.enhance(body.prompt)
    return EnhanceResponse(original=body.prompt, enhanced=enhanced)


@synthesize_router.post("/synthesize", response_model=SynthesizeResponse)
async def synthesize_image(body: SynthesizeRequest, request: Request):
    """Generate an image from an uploaded photo and a prompt."""
    synthesizer: ImageSynthesizer = request.app.state.synthesizer

    try:
        source_image = decode_base64_image(body.image)
    except ValueError as e:
        logger.warning("Rejected undecodable upload", extra={"error": str(e)})
        raise HTTPException(status_code=422, detail=str(e))

    generated = await synthesizer.synthesize(source_image, body.prompt)

    return SynthesizeResponse(
        image=bytes_to_base64(generated.image_bytes),
        width=generated.width,
        height=generated.height,
        model=generated.model_name,
        prompt=generated.prompt_used,
    )
