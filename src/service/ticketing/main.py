"""
Ticket Marketplace - Main Application
Handles accounts, events, checkout, ticket issuance, check-in, transfer and refund.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, engine_manager
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [Ticket Marketplace] Starting up...')

    tracing = TracingConfig(service_name='ticket-marketplace')
    tracing.setup()
    tracing.instrument_httpx()
    Logger.base.info('📊 [Ticket Marketplace] OpenTelemetry tracing configured')

    setup()
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ticket Marketplace] Dependency injection wired')

    if settings.DB_AUTO_CREATE_TABLES:
        await create_db_and_tables()
        Logger.base.info('🗄️ [Ticket Marketplace] Database tables ensured')

    Logger.base.info(
        f'💳 [Ticket Marketplace] Payment provider: {settings.PAYMENT_PROVIDER}, '
        f'email provider: {settings.EMAIL_PROVIDER}'
    )
    Logger.base.info('✅ [Ticket Marketplace] Startup complete')

    yield

    Logger.base.info('🛑 [Ticket Marketplace] Shutting down...')

    await engine_manager.dispose()
    Logger.base.info('🗄️ [Ticket Marketplace] Database engines disposed')

    tracing.shutdown()
    Logger.base.info('📊 [Ticket Marketplace] Tracing shutdown complete')

    container.unwire()
    cleanup()

    Logger.base.info('👋 [Ticket Marketplace] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root():
    """Root endpoint"""
    return {
        'service': settings.PROJECT_NAME,
        'docs': '/docs',
        'health': '/health',
    }
