import logging
import sys
import structlog

logger = structlog.get_logger()


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    """Configure stdlib logging and structlog to share one output stream."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    # uvicorn access logs are replaced by the request logging middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
