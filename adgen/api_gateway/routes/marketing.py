"""
Marketing post endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from adgen.api_gateway.container import Services
from adgen.api_gateway.dependencies import get_current_user, get_orchestrator, get_services
from adgen.api_gateway.orchestrator import AdGenOrchestrator
from adgen.api_gateway.uploads import read_image_upload
from adgen.shared.logging import get_logger
from adgen.shared.models import MarketingPost

logger = get_logger(__name__)

router = APIRouter()


@router.post("/marketing-posts", response_model=MarketingPost, status_code=status.HTTP_201_CREATED)
async def create_marketing_post(
    image: UploadFile = File(...),
    platform: str = Form(...),
    tone: str = Form(...),
    brand_name: Optional[str] = Form(None),
    current_user: dict = Depends(get_current_user),
    services: Services = Depends(get_services),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    """
    Generate and save a marketing post for a product photo.

    Args:
        image: Product photo
        platform: instagram, facebook, twitter, linkedin or tiktok
        tone: professional, casual, funny, inspiring or urgent
        brand_name: Brand to mention in the copy
    """
    upload = await read_image_upload(image, services.settings.max_upload_size_bytes)
    return await orchestrator.generate_marketing_post(
        upload,
        current_user["user_id"],
        platform=platform,
        tone=tone,
        brand_name=brand_name or None,
    )


@router.get("/marketing-posts", response_model=List[MarketingPost])
async def list_marketing_posts(
    current_user: dict = Depends(get_current_user),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    persistence = orchestrator.require_persistence()
    return await persistence.list_marketing_posts(current_user["user_id"])


@router.delete("/marketing-posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_marketing_post(
    post_id: str,
    current_user: dict = Depends(get_current_user),
    orchestrator: AdGenOrchestrator = Depends(get_orchestrator)
):
    persistence = orchestrator.require_persistence()
    deleted = await persistence.delete_marketing_post(current_user["user_id"], post_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Marketing post not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
