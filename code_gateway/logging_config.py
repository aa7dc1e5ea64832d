import logging
import logging.config
import os

import structlog


def configure_logging(log_dir: str = "logs", level: str = "INFO"):
    """
    Configures structlog and standard library logging.
    - JSON lines to <log_dir>/app.log
    - Pretty print to console
    - openai and httpx client chatter only from WARNING up
    """
    os.makedirs(log_dir, exist_ok=True)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers = ["console", "file"]
    quiet = {"handlers": handlers, "level": "WARNING", "propagate": False}
    server = {"handlers": handlers, "level": level, "propagate": False}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": structlog.processors.JSONRenderer(),
                    "foreign_pre_chain": shared_processors,
                },
                "console": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": structlog.dev.ConsoleRenderer(colors=True),
                    "foreign_pre_chain": shared_processors,
                },
            },
            "handlers": {
                "console": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "console",
                    "stream": "ext://sys.stdout",
                },
                "file": {
                    "level": level,
                    "class": "logging.handlers.RotatingFileHandler",
                    "filename": os.path.join(log_dir, "app.log"),
                    "formatter": "json",
                    "maxBytes": 10 * 1024 * 1024,  # 10MB
                    "backupCount": 5,
                },
            },
            "loggers": {
                "": {"handlers": handlers, "level": level, "propagate": True},
                "uvicorn.access": server,
                "uvicorn.error": server,
                "openai": quiet,
                "httpx": quiet,
            },
        }
    )
