from typing import Optional

from fastapi import FastAPI

from synesthesia.api.routes import create_fastapi_app
from synesthesia.config.config import Config
from synesthesia.config.logger import get_logger, setup_logging

logger = get_logger(__name__)


def validate_environment(config: Config) -> list[str]:
    """Collect configuration warnings; missing credentials degrade, never fail startup"""
    warnings = []

    problem = config.credentials.problem()
    if problem:
        warnings.append(f"{problem} - separation will return demo stems")

    if "*" in config.server.cors_origins:
        warnings.append("CORS_ORIGINS allows any origin")

    for w in warnings:
        logger.warning(w)

    return warnings


def create_app(config: Optional[Config] = None) -> FastAPI:
    config = config or Config()

    setup_logging(config.server.debug)
    validate_environment(config)

    return create_fastapi_app(config)
