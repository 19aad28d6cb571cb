import logging
import sys

APP_LOGGER = "todo_app"


def setup_logging(level: str = "INFO") -> None:
    """Configure simple, consistent logging for the service.

    Format: time level logger message k=v ...
    The `todo_app` loggers follow `level`; SQLAlchemy engine chatter stays at WARNING.
    """
    level = level.upper()
    logging.getLogger(APP_LOGGER).setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root = logging.getLogger()
    if root.handlers:
        # Respect existing (e.g., uvicorn, pytest) but align level
        root.setLevel(level)
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(level)
