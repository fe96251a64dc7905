import logging
from typing import Optional

from rich.logging import RichHandler


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(token)s | %(name)s | %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"


class TokenFilter(logging.Filter):
    """Ensures %(token)s is always present in log records to avoid KeyError in format."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "token"):
            record.token = "-"  # default when no token context is known
        return True


def setup_logging(
    level: int = logging.INFO,
    rich_tracebacks: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """Initialize rich-based logging with a safe format that includes the token field.

    When log_file is given, records are also written there in plain text.
    """
    handler = RichHandler(rich_tracebacks=rich_tracebacks, markup=True)
    handler.addFilter(TokenFilter())
    handlers: list[logging.Handler] = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.addFilter(TokenFilter())
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FMT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FMT,
        handlers=handlers,
        force=True,
    )
