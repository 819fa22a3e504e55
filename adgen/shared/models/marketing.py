"""
Marketing copy data models.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from adgen.shared.models.generation import ImageVariation

Platform = Literal["instagram", "facebook", "twitter", "linkedin", "tiktok"]
Tone = Literal["professional", "casual", "funny", "inspiring", "urgent"]


class MarketingContent(BaseModel):
    """Short-form social copy for one product."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    engaging_line: str = Field(
        min_length=1,
        validation_alias=AliasChoices("engaging_line", "engagingLine"),
    )
    content: str = Field(min_length=1)
    hashtags: List[str] = Field(default_factory=list)
    call_to_action: str = Field(
        min_length=1,
        validation_alias=AliasChoices("call_to_action", "callToAction"),
    )


class MarketingPost(MarketingContent):
    """Marketing copy together with the product and its image variations."""

    id: Optional[str] = None
    user_id: str
    tone: Tone
    platform: Platform
    product_image_url: Optional[str] = None
    image_variations: List[ImageVariation] = Field(default_factory=list)
    created_at: Optional[datetime] = None
