"""Application lifespan: startup and shutdown.

Wiring of infrastructure only (logging, telemetry, schema, DB engine
dispose); no business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from agora.core.config import get_settings
from agora.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, telemetry (if enabled), schema creation (if
    DATABASE_AUTO_CREATE). Shutdown order: telemetry shutdown, SQL engine
    dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()

    if settings.telemetry_enabled:
        from agora.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig.from_settings(settings)
        if telemetry.start(app) is not None:
            set_telemetry(telemetry)

    if settings.database_auto_create:
        from agora.infrastructure.persistence.database import create_schema

        await create_schema()
        logger.info("Database schema ensured")

    if settings.test_auth_enabled:
        logger.warning("TEST_AUTH_ENABLED is on; the bypass token is accepted")

    yield

    # ---- Shutdown ----
    from agora.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)

    from agora.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
