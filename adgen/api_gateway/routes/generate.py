"""
Generation endpoints.

Product image sessions, prompt-driven videos and video prompt suggestions.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel

from adgen.api_gateway.dependencies import (
    get_current_user,
    get_optional_user,
    get_orchestrator,
    get_services,
)
from adgen.api_gateway.container import Services
from adgen.api_gateway.orchestrator import AdGenOrchestrator
from adgen.api_gateway.uploads import read_image_upload
from adgen.shared.logging import get_logger
from adgen.shared.models import GenerationSession, Notification, VideoArtifact, VideoPrompt

logger = get_logger(__name__)

router = APIRouter()


class VideoResponse(BaseModel):
    video: VideoArtifact
    notifications: List[Notification]


@router.post("/generate", response_model=GenerationSession)
async def generate(
    image: UploadFile = File(...),
    include_video: bool = Form(False),
    selected_style: Optional[str] = Form(None),
    skip_variations: bool = Form(False),
    current_user: Optional[dict] = Depends(get_optional_user),
    services: Services = Depends(get_services),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    """
    Analyze a product photo and generate its variations and optional video.

    Anonymous sessions are returned but not saved.
    """
    upload = await read_image_upload(image, services.settings.max_upload_size_bytes)
    user_id = current_user["user_id"] if current_user else None
    return await orchestrator.run_session(
        upload,
        user_id=user_id,
        include_video=include_video,
        selected_style=selected_style or None,
        skip_variations=skip_variations,
    )


@router.post("/videos", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def create_video(
    prompt: str = Form(...),
    image: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
    services: Services = Depends(get_services),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    """Generate a text-to-video clip, or image-to-video when an image is attached."""
    upload = None
    if image is not None and image.filename:
        upload = await read_image_upload(image, services.settings.max_upload_size_bytes)

    artifact, notifications = await orchestrator.generate_video_from_prompt(
        prompt, current_user["user_id"], image=upload
    )
    return VideoResponse(video=artifact, notifications=notifications)


@router.post("/video-prompts", response_model=List[VideoPrompt])
async def create_video_prompts(
    image: UploadFile = File(...),
    current_user: Optional[dict] = Depends(get_optional_user),
    services: Services = Depends(get_services),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    """Suggest storytelling video prompts for a product photo."""
    upload = await read_image_upload(image, services.settings.max_upload_size_bytes)
    return await orchestrator.generate_video_prompts(upload)
