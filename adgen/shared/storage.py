"""
Storage utilities.

Uploads and removes generated artifacts in public Supabase Storage buckets.
"""

import asyncio
import mimetypes
from typing import Any, Callable, Dict, Optional

from supabase import Client, create_client

from adgen.shared.config import Settings
from adgen.shared.errors import ConfigError, RetryableError, ValidationError
from adgen.shared.logging import get_logger
from adgen.shared.retry import retry_with_backoff

logger = get_logger("storage")

MB = 1024 * 1024

# Size limits per bucket
DEFAULT_BUCKET_LIMITS: Dict[str, int] = {
    "generated-images": 10 * MB,
    "generated-videos": 100 * MB,
}
FALLBACK_LIMIT = 10 * MB


def create_supabase_client(settings: Settings) -> Client:
    """
    Build a Supabase client from settings.

    Raises:
        ConfigError: If Supabase is not configured or the client cannot be created
    """
    if not settings.supabase_configured:
        raise ConfigError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required for storage")
    try:
        return create_client(settings.supabase_url, settings.supabase_service_key)
    except Exception as e:
        raise ConfigError(f"Failed to initialize Supabase client: {str(e)}") from e


class StorageClient:
    """Public-bucket file operations on an injected Supabase client."""

    def __init__(self, client: Client, bucket_limits: Optional[Dict[str, int]] = None):
        self.client = client
        self.storage = client.storage
        self.bucket_limits = bucket_limits or DEFAULT_BUCKET_LIMITS.copy()

    async def _execute_sync(self, func: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    def _check_size(self, bucket: str, size: int, max_size: Optional[int]) -> None:
        limit = max_size or self.bucket_limits.get(bucket, FALLBACK_LIMIT)
        if size > limit:
            raise ValidationError(
                f"File size ({size / MB:.2f} MB) exceeds maximum of {limit / MB:.2f} MB for bucket {bucket}"
            )

    @retry_with_backoff(max_attempts=3, base_delay=2)
    async def upload_file(
        self,
        bucket: str,
        path: str,
        file_data: bytes,
        content_type: Optional[str] = None,
        max_size: Optional[int] = None
    ) -> str:
        """
        Upload a new object and return its public URL.

        Existing objects are never overwritten; callers pick unique paths.

        Args:
            bucket: Storage bucket name
            path: Object path, ``{user_id}/{file_name}``
            file_data: Object bytes
            content_type: MIME type, guessed from the path when omitted
            max_size: Size limit overriding the bucket default

        Raises:
            ValidationError: If the file is larger than the limit
            RetryableError: If the upload keeps failing
        """
        self._check_size(bucket, len(file_data), max_size)
        content_type = content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
        objects = self.storage.from_(bucket)

        try:
            await self._execute_sync(lambda: objects.upload(
                path=path,
                file=file_data,
                file_options={"content-type": content_type, "upsert": "false"}
            ))
            public_url = await self._execute_sync(lambda: objects.get_public_url(path))
        except Exception as e:
            logger.error(
                "Storage upload failed",
                extra={"bucket": bucket, "path": path, "error": str(e), "error_type": type(e).__name__}
            )
            raise RetryableError(f"Failed to upload file: {str(e)}") from e

        logger.info(
            "Stored object",
            extra={"bucket": bucket, "path": path, "size": len(file_data), "content_type": content_type}
        )
        return str(public_url)

    @retry_with_backoff(max_attempts=3, base_delay=2)
    async def delete_file(self, bucket: str, path: str) -> bool:
        """
        Remove an object.

        Raises:
            RetryableError: If the removal keeps failing
        """
        try:
            await self._execute_sync(lambda: self.storage.from_(bucket).remove([path]))
        except Exception as e:
            logger.error(
                "Storage delete failed",
                extra={"bucket": bucket, "path": path, "error": str(e)}
            )
            raise RetryableError(f"Failed to delete file: {str(e)}") from e

        logger.info("Removed object", extra={"bucket": bucket, "path": path})
        return True

    def path_from_public_url(self, bucket: str, url: str) -> Optional[str]:
        """
        Recover the object path from a public URL of ``bucket``.

        Returns:
            Object path, or None if the URL does not point into the bucket
        """
        marker = f"/storage/v1/object/public/{bucket}/"
        if marker not in url:
            return None
        return url.split(marker, 1)[1].split("?", 1)[0]
