"""
Generation data models.

Defines the prompts, artifacts and the per-upload GenerationSession.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from adgen.shared.models.analysis import ImageAnalysis

GenerationType = Literal["image-to-video", "text-to-video"]
VideoStatus = Literal["pending", "completed", "failed"]
NotificationKind = Literal[
    "success",
    "validation_failed",
    "config_error",
    "generation_failed",
    "fallback_used",
    "persistence_degraded",
]


class VariationPrompt(BaseModel):
    """One creative direction for an alternate rendering of the product."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    prompt_text: str = Field(
        min_length=1,
        validation_alias=AliasChoices("prompt_text", "prompt"),
    )
    description: str = Field(min_length=1)


class VideoPrompt(BaseModel):
    """Storytelling prompt suggested for a video clip."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    prompt: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: GenerationType


class ImageVariation(BaseModel):
    """Generated image variation; never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    style_name: str
    description: str
    artifact_url: str
    prompt_used: str
    original_image_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_ephemeral(self) -> bool:
        """True when the artifact lives only in this response (data: URL)."""
        return self.artifact_url.startswith("data:")


class VideoArtifact(BaseModel):
    """Generated (or fallback) promotional video."""

    model_config = ConfigDict(frozen=True)

    title: str
    prompt: str = Field(min_length=1)
    video_url: str = Field(min_length=1)
    generation_type: GenerationType
    source_image_url: Optional[str] = None
    status: VideoStatus = "completed"
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def require_source_for_image_to_video(self) -> "VideoArtifact":
        """Image-to-video artifacts must reference their seed image."""
        if self.generation_type == "image-to-video" and not self.source_image_url:
            raise ValueError("image-to-video artifacts require a source_image_url")
        return self


class VariationFailure(BaseModel):
    """A variation prompt that produced no image."""

    style_name: str
    reason: str


class Notification(BaseModel):
    """Human-readable message describing one terminal state."""

    kind: NotificationKind
    message: str


class GenerationSession(BaseModel):
    """Result of one upload-to-artifacts flow. Not persisted."""

    session_id: str
    analysis: ImageAnalysis
    variations: List[ImageVariation] = Field(default_factory=list)
    variation_failures: List[VariationFailure] = Field(default_factory=list)
    video: Optional[VideoArtifact] = None
    video_prompt: Optional[str] = None
    original_image_url: Optional[str] = None
    notifications: List[Notification] = Field(default_factory=list)
    status: Literal["completed", "failed"] = "completed"

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.notifications.append(Notification(kind=kind, message=message))
