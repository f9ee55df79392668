"""Loguru setup for the profile service.

Every record carries ``service``, ``environment`` and ``request_id`` extras;
the request middleware overrides ``request_id`` per request.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.profile_service.runtime.config.config_data import ConfigData
from src.profile_service.runtime.context import get_config

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "{extra[service]} | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers that are noisy at DEBUG/INFO
_QUIET_LOGGERS = {
    "sqlalchemy.pool": logging.WARNING,
    "uvicorn": logging.INFO,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.CRITICAL,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib records (uvicorn, SQLAlchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == "uvicorn.access":
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_console_sink(config: ConfigData, diagnose: bool) -> None:
    # Production consoles feed log collectors, so they get JSON when asked for
    serialize = config.logging.format == "json" and config.app.environment == "production"
    logger.add(
        sys.stderr,
        level=config.logging.level,
        format="{message}" if serialize else PLAIN_FORMAT,
        colorize=not serialize,
        serialize=serialize,
        backtrace=diagnose,
        diagnose=diagnose,
    )


def _add_file_sink(config: ConfigData, diagnose: bool) -> None:
    cfg = config.logging
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    serialize = cfg.format == "json"
    logger.add(
        str(path),
        level=cfg.level,
        format="{message}" if serialize else PLAIN_FORMAT,
        serialize=serialize,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=diagnose,
        diagnose=diagnose,
    )


def _route_stdlib_logging(sql_level: str) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    # INFO on sqlalchemy.engine logs every statement with its parameters
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging(config: ConfigData | None = None) -> None:
    """Replace all loguru sinks according to ``config`` (default: current config)."""
    config = config or get_config()
    # Variable names in tracebacks can expose request data
    diagnose = config.app.environment != "production"

    logger.remove()
    logger.configure(
        extra={
            "request_id": "-",
            "service": config.app.name,
            "environment": config.app.environment,
        }
    )

    _add_console_sink(config, diagnose)
    if config.logging.file:
        _add_file_sink(config, diagnose)
    _route_stdlib_logging(config.logging.sql_level)

    logger.info(
        "Logging configured",
        log_level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file or None,
        sql_level=config.logging.sql_level,
    )
