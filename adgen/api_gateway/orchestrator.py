"""
Generation orchestration.

Sequences analysis, prompt generation, image variations, the optional video
and persistence for each user action, and records every terminal state as a
notification on the returned session.
"""

import time
import uuid
from typing import List, Optional, Tuple

from adgen.modules.analysis import analyze_image
from adgen.modules.image_variations import VariationBatch, generate_variations
from adgen.modules.marketing import generate_marketing_content, marketing_variation_prompts
from adgen.modules.media_encoder import EncodedImage
from adgen.modules.persistence import PersistenceAdapter
from adgen.modules.prompt_generator import generate_variation_prompts, generate_video_prompts
from adgen.modules.providers import CompletionClient, GenAIClient, require_client
from adgen.modules.video_generator import (
    VideoOptions,
    VideoRequest,
    generate_product_video,
    generate_video,
)
from adgen.shared.config import Settings
from adgen.shared.errors import ConfigError, GenerationError, PersistenceError, PipelineError
from adgen.shared.logging import get_logger, set_session_id
from adgen.shared.models import (
    Degraded,
    GenerationSession,
    MarketingPost,
    Notification,
    Ok,
    Outcome,
    VideoArtifact,
    VideoPrompt,
)
from adgen.shared.validation import validate_platform, validate_prompt, validate_tone

logger = get_logger(__name__)


def _video_notifications(outcome: Outcome, fallback_url: str) -> List[Notification]:
    if isinstance(outcome, Ok):
        return [Notification(kind="success", message="Video generated")]
    if isinstance(outcome, Degraded) and outcome.value.video_url == fallback_url:
        return [Notification(
            kind="fallback_used",
            message=f"Video generation failed, showing a sample video instead ({outcome.reason})",
        )]
    return [Notification(kind="persistence_degraded", message=outcome.reason)]


class AdGenOrchestrator:
    """Runs the user-facing generation flows."""

    def __init__(
        self,
        settings: Settings,
        completion: Optional[CompletionClient],
        genai: Optional[GenAIClient],
        persistence: Optional[PersistenceAdapter]
    ):
        self.settings = settings
        self.completion = completion
        self.genai = genai
        self.persistence = persistence
        self.video_options = VideoOptions.from_settings(settings)

    def _storage_for(self, user_id: Optional[str]) -> Optional[PersistenceAdapter]:
        return self.persistence if user_id else None

    def require_persistence(self) -> PersistenceAdapter:
        """
        Return the persistence adapter.

        Raises:
            ConfigError: If Supabase is not configured
        """
        if self.persistence is None:
            raise ConfigError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required to store and list artifacts")
        return self.persistence

    async def _store_original(
        self,
        upload: EncodedImage,
        user_id: Optional[str],
        prefix: str = "original"
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Upload the original image for a signed-in user.

        Returns:
            (public URL or None, degradation reason or None)
        """
        persistence = self._storage_for(user_id)
        if persistence is None:
            return None, None

        file_name = f"{prefix}_{int(time.time() * 1000)}.{upload.extension}"
        try:
            return await persistence.upload_image(user_id, file_name, upload.decode(), upload.mime_type), None
        except PersistenceError as e:
            logger.warning("Original image could not be stored", extra={"error": str(e)})
            return None, f"Original image was not saved: {e.message}"

    async def run_session(
        self,
        upload: EncodedImage,
        user_id: Optional[str] = None,
        include_video: bool = False,
        selected_style: Optional[str] = None,
        skip_variations: bool = False
    ) -> GenerationSession:
        """
        Analyze an upload and generate its variations and optional video.

        Args:
            upload: Encoded product image
            user_id: Signed-in user; anonymous sessions are not persisted
            include_video: Also generate the product video
            selected_style: Style prefix for the video prompt
            skip_variations: Skip the image variations

        Returns:
            GenerationSession with artifacts and notifications

        Raises:
            ConfigError: If a required provider key is missing
            GenerationError: If analysis fails or no variation could be produced
        """
        session_id = str(uuid.uuid4())
        set_session_id(session_id)
        logger.info(
            "Generation session started",
            extra={
                "user_id": user_id,
                "include_video": include_video,
                "skip_variations": skip_variations,
                "size_bytes": upload.size_bytes,
            }
        )

        try:
            analysis = await analyze_image(self.completion, upload, model=self.settings.analysis_model)
            session = GenerationSession(session_id=session_id, analysis=analysis)

            if user_id and self.persistence is None:
                session.notify("persistence_degraded", "Storage is not configured; results will not be saved")

            original_url, reason = await self._store_original(upload, user_id)
            session.original_image_url = original_url
            if reason:
                session.notify("persistence_degraded", reason)

            if not skip_variations:
                batch = await self._generate_variations(upload, analysis, user_id, original_url)
                self._record_batch(session, batch)

            if include_video:
                await self._generate_session_video(session, upload, selected_style, user_id)
        except PipelineError as e:
            e.session_id = e.session_id or session_id
            logger.error(
                "Generation session failed",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            raise

        session.notify("success", "Generation completed")
        logger.info(
            "Generation session completed",
            extra={
                "variations": len(session.variations),
                "failed_variations": len(session.variation_failures),
                "video": session.video is not None,
            }
        )
        return session

    async def _generate_variations(self, upload, analysis, user_id, original_url) -> VariationBatch:
        # Check the image provider before spending a completion on prompts
        genai = require_client(self.genai, "GOOGLE_API_KEY", "image generation")
        prompts = await generate_variation_prompts(
            self.completion,
            analysis,
            image=upload,
            count=self.settings.variation_count,
            model=self.settings.analysis_model,
        )
        batch = await generate_variations(
            genai,
            prompts,
            upload,
            user_id=user_id,
            persistence=self._storage_for(user_id),
            original_image_url=original_url,
            concurrency=self.settings.variation_concurrency,
            model=self.settings.image_model,
        )
        if not batch.succeeded:
            reasons = "; ".join(f.reason for f in batch.failures)
            raise GenerationError(f"No image variations could be generated: {reasons}")
        return batch

    def _record_batch(self, session: GenerationSession, batch: VariationBatch) -> None:
        session.variations = batch.variations
        session.variation_failures = batch.failures
        for failure in batch.failures:
            session.notify("generation_failed", f"{failure.style_name}: {failure.reason}")
        for degraded in batch.degraded:
            session.notify("persistence_degraded", degraded.reason)

    async def _generate_session_video(
        self,
        session: GenerationSession,
        upload: EncodedImage,
        selected_style: Optional[str],
        user_id: Optional[str]
    ) -> None:
        try:
            outcome = await generate_product_video(
                self.genai,
                upload,
                session.analysis,
                selected_style=selected_style,
                user_id=user_id,
                source_image_url=session.original_image_url,
                persistence=self._storage_for(user_id),
                options=self.video_options,
            )
        except ConfigError as e:
            logger.warning("Video skipped", extra={"error": str(e)})
            session.notify("config_error", e.message)
            return

        artifact: VideoArtifact = outcome.value
        session.video = artifact
        session.video_prompt = artifact.prompt
        for notification in _video_notifications(outcome, self.video_options.fallback_video_url):
            if notification.kind != "success":
                session.notifications.append(notification)

    async def generate_video_from_prompt(
        self,
        prompt: str,
        user_id: str,
        image: Optional[EncodedImage] = None
    ) -> Tuple[VideoArtifact, List[Notification]]:
        """
        Generate a video from a user prompt, seeded by an image when given.

        Returns:
            The artifact (possibly the fallback) and the notifications describing it

        Raises:
            ValidationError: If the prompt is invalid
            ConfigError: If GOOGLE_API_KEY is missing
        """
        prompt = validate_prompt(prompt)
        set_session_id(str(uuid.uuid4()))
        require_client(self.genai, "GOOGLE_API_KEY", "video generation")

        notifications: List[Notification] = []
        source_image_url = None
        if image is not None:
            source_image_url, reason = await self._store_original(image, user_id, prefix="video_source")
            if reason:
                notifications.append(Notification(kind="persistence_degraded", message=reason))

        outcome = await generate_video(
            self.genai,
            VideoRequest(prompt=prompt, image=image, source_image_url=source_image_url, user_id=user_id),
            persistence=self._storage_for(user_id),
            options=self.video_options,
        )
        notifications.extend(_video_notifications(outcome, self.video_options.fallback_video_url))
        return outcome.value, notifications

    async def generate_video_prompts(self, upload: EncodedImage) -> List[VideoPrompt]:
        """
        Suggest storytelling video prompts for an uploaded product.

        Raises:
            ConfigError: If OPENAI_API_KEY is missing
            GenerationError: If analysis or prompt generation fails
        """
        analysis = await analyze_image(self.completion, upload, model=self.settings.analysis_model)
        return await generate_video_prompts(self.completion, analysis, model=self.settings.analysis_model)

    async def generate_marketing_post(
        self,
        upload: EncodedImage,
        user_id: str,
        platform: str,
        tone: str,
        brand_name: Optional[str] = None
    ) -> MarketingPost:
        """
        Write marketing copy for an upload, render its variations and save the post.

        Variations are best effort; the post is saved with whatever succeeded.

        Raises:
            ValidationError: If platform or tone is not supported
            ConfigError: If a provider key or Supabase is not configured
            GenerationError: If analysis or copywriting fails
            PersistenceError: If the post cannot be saved
        """
        validate_platform(platform)
        validate_tone(tone)
        persistence = self.require_persistence()
        genai = require_client(self.genai, "GOOGLE_API_KEY", "image generation")
        set_session_id(str(uuid.uuid4()))

        analysis = await analyze_image(self.completion, upload, model=self.settings.analysis_model)
        content = await generate_marketing_content(
            self.completion, analysis, platform, tone, brand_name, model=self.settings.copy_model
        )

        batch = await generate_variations(
            genai,
            marketing_variation_prompts(analysis),
            upload,
            user_id=user_id,
            persistence=persistence,
            concurrency=self.settings.variation_concurrency,
            model=self.settings.image_model,
        )
        if batch.failures:
            logger.warning(
                "Some marketing variations failed",
                extra={"failed": [f.style_name for f in batch.failures]}
            )

        original_url, reason = await self._store_original(upload, user_id, prefix="marketing_original")
        if reason:
            raise PersistenceError(reason)

        post = MarketingPost(
            user_id=user_id,
            tone=tone,
            platform=platform,
            product_image_url=original_url,
            image_variations=[v for v in batch.variations if not v.is_ephemeral],
            **content.model_dump(),
        )
        saved = await persistence.save_marketing_post(post)
        logger.info("Marketing post saved", extra={"post_id": saved.id, "platform": platform})
        return saved
