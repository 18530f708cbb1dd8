import logging
import sys
import structlog
from structlog.types import Processor


def configure_logging(log_level: str = "INFO", is_debug: bool = False):
    """
    Route promptswitch events (``prompt.enabled``, ``prompt.backfilled``,
    ``prompt.backup_created``, ``prompt_file.written``...) to stdout.

    Both ``flask run`` and the ``flask <prompt command>`` CLI go through
    ``create_app``, so the two share this setup.

    - Debug config: colored key=value lines for a terminal.
    - Otherwise: one JSON object per event, with the prompt id and the
      prompt file path as fields.
    """

    # Flask, SQLAlchemy and werkzeug still log through the stdlib root logger
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level.upper(),
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.dict_tracebacks,
        # Prompt content is arbitrary user text
        structlog.processors.UnicodeDecoder(),
    ]

    if is_debug:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        final_processor = structlog.processors.JSONRenderer(ensure_ascii=False)

    structlog.configure(
        processors=[
            *shared_processors,
            final_processor,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # One INFO line per API request drowns out prompt switches
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "logging.configured",
        renderer="console" if is_debug else "json",
        level=log_level.upper(),
    )
