from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from synesthesia.config.logger import get_logger
from synesthesia.services.dependencies import services
from synesthesia.services.downloader import AudioDownloader
from synesthesia.services.fallback import FallbackProvider
from synesthesia.services.file_manager import FileManager
from synesthesia.services.job_client import MusicAIClient
from synesthesia.services.orchestrator import StemSeparationService

logger = get_logger(__name__)


def setup_services(config) -> None:
    credentials = config.credentials
    problem = credentials.problem()
    if problem:
        logger.warning(f"{problem} - every request will be served in demo mode")
    else:
        logger.info(
            "Music.ai credentials loaded",
            key_length=len(credentials.api_key),
            workflow=credentials.workflow_id,
        )

    provider = config.provider
    services.http_client = httpx.AsyncClient(timeout=provider.request_timeout)
    client = MusicAIClient(
        services.http_client,
        base_url=provider.base_url,
        poll_interval=provider.poll_interval,
        max_poll_attempts=provider.max_poll_attempts,
    )
    services.separation_service = StemSeparationService(
        credentials, client, fallback=FallbackProvider()
    )

    downloads = config.downloads
    services.downloader = AudioDownloader(downloads.download_dir, downloads.cookies_file)
    services.file_manager = FileManager(
        downloads.upload_dir, config.input_limits.max_file_size_mb
    )


def configure_middleware(app: FastAPI, config) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


def create_lifespan_manager(config):
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        # Startup
        setup_services(config)
        logger.info("Service ready", port=config.server.port)

        yield

        # Shutdown
        await services.close()

    return lifespan


def create_base_app(config) -> FastAPI:
    return FastAPI(
        version="1.0.0",
        title="Synesthesia Stem Separation API",
        description="API for splitting songs into drums, bass, vocals, guitar and piano stems",
        docs_url="/docs" if config.server.debug else None,
        redoc_url="/redoc" if config.server.debug else None,
    )
