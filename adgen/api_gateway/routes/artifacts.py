"""
Saved artifact endpoints.

Lists and deletes the signed-in user's image variations and videos, and
reports their usage statistics.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from adgen.api_gateway.dependencies import get_current_user, get_orchestrator
from adgen.api_gateway.orchestrator import AdGenOrchestrator
from adgen.shared.logging import get_logger
from adgen.shared.models import ImageVariation, UsageStats, VideoArtifact

logger = get_logger(__name__)

router = APIRouter()


@router.get("/variations", response_model=List[ImageVariation])
async def list_variations(
    current_user: dict = Depends(get_current_user),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    persistence = orchestrator.require_persistence()
    return await persistence.list_image_variations(current_user["user_id"])


@router.delete("/variations/{variation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_variation(
    variation_id: str,
    current_user: dict = Depends(get_current_user),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    persistence = orchestrator.require_persistence()
    deleted = await persistence.delete_image_variation(current_user["user_id"], variation_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image variation not found")
    logger.info("Deleted image variation", extra={"variation_id": variation_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/videos", response_model=List[VideoArtifact])
async def list_videos(
    current_user: dict = Depends(get_current_user),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    persistence = orchestrator.require_persistence()
    return await persistence.list_videos(current_user["user_id"])


@router.delete("/videos/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: str,
    current_user: dict = Depends(get_current_user),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    persistence = orchestrator.require_persistence()
    deleted = await persistence.delete_video(current_user["user_id"], video_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    logger.info("Deleted video", extra={"video_id": video_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=UsageStats)
async def usage_stats(
    current_user: dict = Depends(get_current_user),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    persistence = orchestrator.require_persistence()
    settings = orchestrator.settings
    return await persistence.usage_stats(
        current_user["user_id"],
        monthly_credits=settings.monthly_credits,
        recent_limit=settings.recent_generations_limit,
    )
