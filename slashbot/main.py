"""
FastAPI application entry point.
"""

from fastapi import FastAPI

from slashbot import __version__
from slashbot.api import webhooks
from slashbot.config import settings
from slashbot.utils.logging import setup_logging, get_logger

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Slashbot",
    description="Slash-command bot for GitHub pull request comments",
    version=__version__
)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Slashbot API",
        "version": __version__,
        "docs": "/docs"
    }


# Include API routers
app.include_router(webhooks.router)


@app.on_event("startup")
async def startup_event():
    """Log configuration problems at startup rather than on the first delivery."""
    logger.info("Starting Slashbot API")
    if settings.github_app_id is None:
        logger.warning("GITHUB_APP_ID is not set; comment events cannot be handled")
    if not settings.webhook_secret:
        logger.warning("WEBHOOK_SECRET is not set; webhook signatures are not verified")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
