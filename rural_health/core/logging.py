import logging
import sys
import structlog
from pythonjsonlogger import jsonlogger


def setup_logging(level: str = "INFO", json_output: bool = True):
    """Structured logging setup shared by the API and the operator scripts"""

    # JSON formatter for the root handler
    json_formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s"
    )

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Setup root logger once; repeated calls only adjust the level
    logger = logging.getLogger()
    if not any(getattr(h, "_rural_health", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(json_formatter)
        handler._rural_health = True
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return structlog.get_logger()
