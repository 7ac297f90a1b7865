import asyncio
import uvicorn
from core.config import get_settings
from core.logger import setup_logging, logger
from api.main import create_app


async def start_api():
    settings = get_settings()
    app = create_app(settings)
    config = uvicorn.Config(app, host="0.0.0.0", port=8000, log_level=settings.LOG_LEVEL.lower())
    server = uvicorn.Server(config)
    await server.serve()


async def main():
    settings = get_settings()

    # Setup structured logging
    setup_logging(settings.LOG_LEVEL, debug=settings.DEBUG)

    logger.info("Starting API...", env=settings.ENV)
    await start_api()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Application stopped.")
