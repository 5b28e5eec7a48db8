import logging
import sys

from billrecon.settings import settings

TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "alembic.runtime.migration")


def configure_logging(level: str | None = None) -> None:
    """Install a single stderr handler on the root logger.

    ``level`` overrides ``settings.log_level`` (the CLI passes DEBUG for
    ``--verbose``).  Run again through ``reconfigure()`` once Alembic has
    applied its own ``fileConfig``.
    """
    level_name = (level or settings.log_level).upper()
    root_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt=JSON_FORMAT,
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(root_level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


reconfigure = configure_logging
