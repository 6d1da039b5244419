#!/usr/bin/env python3
"""
FastAPI server for browsing an Azure Service Bus emulator.
Runs next to the emulator (e.g. as an Aspire resource).
"""

# Load environment variables first
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from common.logging import get_logger
from routes import entities, health, messages
from services.entity_service import EntityService

load_dotenv()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.entity_service = EntityService()
    logger.info("Entity service ready")
    yield


# Initialize
app = FastAPI(
    title="Service Bus Emulator Explorer API",
    description="Entity catalog, address resolution and messaging for the Azure Service Bus emulator",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(entities.router)
app.include_router(messages.router)


if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 8080))

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level="info",
    )
