"""
Persistence adapter.

Stores generated artifacts in Supabase Storage and records them in Supabase
tables. The service key bypasses row level security, so every read and
delete filters on user_id explicitly.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from adgen.shared.database import DatabaseClient
from adgen.shared.errors import PersistenceError, PipelineError
from adgen.shared.logging import get_logger
from adgen.shared.models import ImageVariation, MarketingPost, UsageStats, VideoArtifact
from adgen.shared.storage import StorageClient

logger = get_logger("persistence")

IMAGE_VARIATIONS_TABLE = "image_variations"
VIDEOS_TABLE = "videos"

# Marketing posts share the image_variations table, marked by variation_name
MARKETING_POST_MARKER = "marketing_post"


def _first_row(result: Any) -> Dict[str, Any]:
    rows = getattr(result, "data", None) or []
    if not rows:
        raise PersistenceError("Insert returned no row")
    return rows[0]


def _variation_from_row(row: Dict[str, Any]) -> ImageVariation:
    return ImageVariation(
        id=str(row["id"]),
        style_name=row.get("variation_name") or "",
        description=row.get("variation_description") or "",
        artifact_url=row["generated_image_url"],
        prompt_used=row.get("prompt_used") or "",
        original_image_url=row.get("original_image_url"),
        created_at=row.get("created_at"),
    )


def _video_from_row(row: Dict[str, Any]) -> VideoArtifact:
    return VideoArtifact(
        id=str(row["id"]),
        title=row.get("title") or "",
        prompt=row["prompt"],
        video_url=row["video_url"],
        generation_type=row["generation_type"],
        source_image_url=row.get("source_image_url"),
        status=row.get("status") or "completed",
        created_at=row.get("created_at"),
    )


def _marketing_post_from_row(row: Dict[str, Any]) -> MarketingPost:
    details = json.loads(row.get("variation_description") or "{}")
    return MarketingPost(
        id=str(row["id"]),
        user_id=row["user_id"],
        title=details["title"],
        engaging_line=details["engaging_line"],
        content=details["content"],
        hashtags=details.get("hashtags", []),
        call_to_action=details["call_to_action"],
        tone=details["tone"],
        platform=details["platform"],
        product_image_url=row.get("original_image_url"),
        image_variations=details.get("image_variations", []),
        created_at=row.get("created_at"),
    )


class PersistenceAdapter:
    """Saves, lists and deletes a user's generated artifacts."""

    def __init__(
        self,
        storage: StorageClient,
        db: DatabaseClient,
        images_bucket: str = "generated-images",
        videos_bucket: str = "generated-videos"
    ):
        self.storage = storage
        self.db = db
        self.images_bucket = images_bucket
        self.videos_bucket = videos_bucket

    async def _upload(self, bucket: str, user_id: str, file_name: str, data: bytes, content_type: str) -> str:
        path = f"{user_id}/{file_name}"
        try:
            return await self.storage.upload_file(bucket, path, data, content_type=content_type)
        except PipelineError as e:
            raise PersistenceError(f"Failed to store {bucket}/{path}: {e.message}") from e

    async def upload_image(self, user_id: str, file_name: str, data: bytes, content_type: str) -> str:
        """
        Upload an image under the user's folder.

        Returns:
            Public URL of the stored image

        Raises:
            PersistenceError: If the upload fails
        """
        return await self._upload(self.images_bucket, user_id, file_name, data, content_type)

    async def upload_video(self, user_id: str, file_name: str, data: bytes) -> str:
        """
        Upload an MP4 video under the user's folder.

        Raises:
            PersistenceError: If the upload fails
        """
        return await self._upload(self.videos_bucket, user_id, file_name, data, "video/mp4")

    async def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = await self.db.table(table).insert(row).execute()
        except PipelineError as e:
            raise PersistenceError(f"Failed to insert into {table}: {e.message}") from e
        return _first_row(result)

    @staticmethod
    def _by_variation_name(query, variation_name: Optional[str], exclude_variation_name: Optional[str]):
        if variation_name:
            query = query.eq("variation_name", variation_name)
        if exclude_variation_name:
            query = query.neq("variation_name", exclude_variation_name)
        return query

    async def _select(self, table: str, user_id: str, variation_name: Optional[str] = None,
                      exclude_variation_name: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = self._by_variation_name(
            self.db.table(table).select("*").eq("user_id", user_id), variation_name, exclude_variation_name
        )
        query = query.order("created_at", desc=True)
        if limit:
            query = query.limit(limit)
        try:
            result = await query.execute()
        except PipelineError as e:
            raise PersistenceError(f"Failed to list {table}: {e.message}") from e
        return result.data or []

    async def _delete(self, table: str, user_id: str, row_id: str, variation_name: Optional[str] = None,
                      exclude_variation_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        query = self._by_variation_name(
            self.db.table(table).delete().eq("id", row_id).eq("user_id", user_id), variation_name, exclude_variation_name
        )
        try:
            result = await query.execute()
        except PipelineError as e:
            raise PersistenceError(f"Failed to delete from {table}: {e.message}") from e
        rows = result.data or []
        return rows[0] if rows else None

    async def _remove_object(self, bucket: str, url: Optional[str]) -> None:
        """Remove the stored file behind a deleted row. Failures are only logged."""
        path = self.storage.path_from_public_url(bucket, url) if url else None
        if not path:
            return
        try:
            await self.storage.delete_file(bucket, path)
        except PipelineError as e:
            logger.warning(
                "Row deleted but stored file could not be removed",
                extra={"bucket": bucket, "path": path, "error": str(e)}
            )

    async def record_image_variation(self, user_id: str, variation: ImageVariation) -> ImageVariation:
        """
        Insert an image_variations row.

        Returns:
            The variation with its row id and creation time

        Raises:
            PersistenceError: If the insert fails
        """
        row = await self._insert(IMAGE_VARIATIONS_TABLE, {
            "user_id": user_id,
            "original_image_url": variation.original_image_url,
            "variation_name": variation.style_name,
            "variation_description": variation.description,
            "generated_image_url": variation.artifact_url,
            "prompt_used": variation.prompt_used,
        })
        logger.info("Recorded image variation", extra={"variation_id": row.get("id"), "style": variation.style_name})
        return _variation_from_row(row)

    async def record_video(self, user_id: str, artifact: VideoArtifact) -> VideoArtifact:
        """
        Insert a videos row.

        Raises:
            PersistenceError: If the insert fails
        """
        row = await self._insert(VIDEOS_TABLE, {
            "user_id": user_id,
            "title": artifact.title,
            "prompt": artifact.prompt,
            "video_url": artifact.video_url,
            "generation_type": artifact.generation_type,
            "source_image_url": artifact.source_image_url,
            "status": artifact.status,
        })
        logger.info("Recorded video", extra={"video_id": row.get("id"), "generation_type": artifact.generation_type})
        return _video_from_row(row)

    async def list_image_variations(self, user_id: str) -> List[ImageVariation]:
        """List the user's image variations, newest first. Marketing posts are excluded."""
        rows = await self._select(IMAGE_VARIATIONS_TABLE, user_id, exclude_variation_name=MARKETING_POST_MARKER)
        return [_variation_from_row(row) for row in rows]

    async def delete_image_variation(self, user_id: str, variation_id: str) -> bool:
        """
        Delete one of the user's image variations and its stored file.

        Returns:
            False if the user owns no such variation. Marketing posts are
            never matched; use delete_marketing_post for those.
        """
        row = await self._delete(
            IMAGE_VARIATIONS_TABLE, user_id, variation_id, exclude_variation_name=MARKETING_POST_MARKER
        )
        if row is None:
            return False
        await self._remove_object(self.images_bucket, row.get("generated_image_url"))
        return True

    async def list_videos(self, user_id: str) -> List[VideoArtifact]:
        """List the user's videos, newest first."""
        rows = await self._select(VIDEOS_TABLE, user_id)
        return [_video_from_row(row) for row in rows]

    async def delete_video(self, user_id: str, video_id: str) -> bool:
        """
        Delete one of the user's videos and its stored file.

        Returns:
            False if the user owns no such video
        """
        row = await self._delete(VIDEOS_TABLE, user_id, video_id)
        if row is None:
            return False
        await self._remove_object(self.videos_bucket, row.get("video_url"))
        return True

    async def save_marketing_post(self, post: MarketingPost) -> MarketingPost:
        """
        Store a marketing post as a marked image_variations row.

        The copy, tone, platform and variations are serialized as JSON into
        variation_description.

        Raises:
            PersistenceError: If the insert fails
        """
        details = {
            "title": post.title,
            "content": post.content,
            "hashtags": post.hashtags,
            "engaging_line": post.engaging_line,
            "call_to_action": post.call_to_action,
            "tone": post.tone,
            "platform": post.platform,
            "image_variations": [v.model_dump(mode="json") for v in post.image_variations],
        }
        row = await self._insert(IMAGE_VARIATIONS_TABLE, {
            "user_id": post.user_id,
            "original_image_url": post.product_image_url,
            "variation_name": MARKETING_POST_MARKER,
            "variation_description": json.dumps(details),
            "generated_image_url": post.product_image_url or "",
            "prompt_used": f"Marketing post for {post.platform} with {post.tone} tone",
        })
        return _marketing_post_from_row(row)

    async def list_marketing_posts(self, user_id: str) -> List[MarketingPost]:
        """List the user's marketing posts, newest first."""
        rows = await self._select(IMAGE_VARIATIONS_TABLE, user_id, variation_name=MARKETING_POST_MARKER)
        posts = []
        for row in rows:
            try:
                posts.append(_marketing_post_from_row(row))
            except (ValueError, KeyError) as e:
                logger.warning("Skipping unreadable marketing post", extra={"post_id": row.get("id"), "error": str(e)})
        return posts

    async def delete_marketing_post(self, user_id: str, post_id: str) -> bool:
        """
        Delete one of the user's marketing posts.

        Returns:
            False if the user owns no such post
        """
        row = await self._delete(IMAGE_VARIATIONS_TABLE, user_id, post_id, variation_name=MARKETING_POST_MARKER)
        return row is not None

    async def _count_since(self, user_id: str, since: datetime) -> int:
        query = (
            self.db.table(IMAGE_VARIATIONS_TABLE)
            .select("id", count="exact")
            .eq("user_id", user_id)
            .gte("created_at", since.isoformat())
        )
        try:
            result = await query.execute()
        except PipelineError as e:
            raise PersistenceError(f"Failed to count {IMAGE_VARIATIONS_TABLE}: {e.message}") from e
        return result.count or 0

    async def usage_stats(
        self,
        user_id: str,
        monthly_credits: int = 50,
        recent_limit: int = 6,
        now: Optional[datetime] = None
    ) -> UsageStats:
        """
        Count the user's generations this month and today, and fetch the
        latest ones.

        Every image_variations row counts as one generation, marketing posts
        included. Month and day boundaries are UTC.

        Raises:
            PersistenceError: If a query fails
        """
        now = now or datetime.now(timezone.utc)
        start_of_day = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_month = start_of_day.replace(day=1)

        this_month = await self._count_since(user_id, start_of_month)
        today = await self._count_since(user_id, start_of_day)
        rows = await self._select(
            IMAGE_VARIATIONS_TABLE, user_id, exclude_variation_name=MARKETING_POST_MARKER, limit=recent_limit
        )
        return UsageStats(
            generations_this_month=this_month,
            generations_today=today,
            credits_total=monthly_credits,
            recent_generations=[_variation_from_row(row) for row in rows],
        )
