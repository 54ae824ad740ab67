"""Main entry point for the chat API server."""

import uvicorn

from src.api.app import create_app
from src.api.handlers import get_chat_handlers
from src.utils.config import get_settings
from src.utils.logger import setup_logger, get_logger

# Initialize logger
setup_logger()
logger = get_logger()


def main():
    """Start the API server."""
    settings = get_settings()

    logger.info("Starting Delivery Assistant API...")
    logger.info(f"Orchestrator model: {settings.orchestrator_model}")
    logger.info(f"Address specialist model: {settings.address_specialist_model}")
    logger.info(f"Damage specialist model: {settings.damage_specialist_model}")

    # Build the orchestrator up front so configuration errors stop startup
    handlers = get_chat_handlers()
    app = create_app(handlers)

    logger.info(f"🚀 Server starting on {settings.api_host}:{settings.api_port}")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
