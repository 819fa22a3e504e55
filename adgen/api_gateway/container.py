"""
Service construction.

Builds the provider clients, the persistence adapter and the orchestrator
from settings. A missing credential leaves its client unset; the features
that need it raise ConfigError when called.
"""

from dataclasses import dataclass
from typing import Optional

from adgen.api_gateway.orchestrator import AdGenOrchestrator
from adgen.modules.persistence import PersistenceAdapter
from adgen.modules.providers import CompletionClient, GenAIClient
from adgen.shared.config import Settings
from adgen.shared.database import DatabaseClient
from adgen.shared.logging import get_logger
from adgen.shared.storage import StorageClient, create_supabase_client

logger = get_logger(__name__)


@dataclass
class Services:
    settings: Settings
    orchestrator: AdGenOrchestrator
    completion: Optional[CompletionClient] = None
    genai: Optional[GenAIClient] = None
    persistence: Optional[PersistenceAdapter] = None
    database: Optional[DatabaseClient] = None


def build_services(settings: Settings) -> Services:
    """
    Construct every service for the application.

    Raises:
        ConfigError: If Supabase is configured but the client cannot be created
    """
    completion = None
    if settings.openai_api_key:
        completion = CompletionClient(settings.openai_api_key, default_model=settings.analysis_model)
    else:
        logger.warning("OPENAI_API_KEY not set; analysis, prompts and copywriting are disabled")

    genai = None
    if settings.google_api_key:
        genai = GenAIClient(settings.google_api_key)
    else:
        logger.warning("GOOGLE_API_KEY not set; image and video generation are disabled")

    persistence = None
    database = None
    if settings.supabase_configured:
        client = create_supabase_client(settings)
        storage = StorageClient(client, bucket_limits={
            settings.images_bucket: settings.max_upload_size_bytes,
            settings.videos_bucket: 100 * 1024 * 1024,
        })
        database = DatabaseClient(client)
        persistence = PersistenceAdapter(
            storage,
            database,
            images_bucket=settings.images_bucket,
            videos_bucket=settings.videos_bucket,
        )
    else:
        logger.warning("Supabase not configured; generated artifacts will not be saved")

    orchestrator = AdGenOrchestrator(settings, completion, genai, persistence)
    return Services(
        settings=settings,
        orchestrator=orchestrator,
        completion=completion,
        genai=genai,
        persistence=persistence,
        database=database,
    )
