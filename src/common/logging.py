import logging
import sys

from loguru import logger

from common.config import config


class InterceptHandler(logging.Handler):
    """Forward stdlib log records (azure SDK, uvicorn) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.bind(name=record.name).opt(exception=record.exc_info).log(level, record.getMessage())


# Loguru config
logger.remove()
logger.add(sys.stderr, format=config.log_format, level=config.log_level, colorize=True)

# The azure SDK logs every AMQP frame at INFO
logging.getLogger("azure").setLevel(logging.WARNING)
logging.getLogger("azure").addHandler(InterceptHandler())
logging.getLogger("azure").propagate = False


def get_logger(name: str | None = None):
    return logger.bind(name=name) if name else logger
