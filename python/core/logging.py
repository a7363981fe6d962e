"""
Logging setup and the event helpers services use for training and verification.
One console handler on the root logger; modules log through get_logger(__name__).
"""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Third-party loggers that drown out request-level events at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3", "PIL", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """
    Console formatter that colors the level name.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy; the record is shared with every other handler
        colored = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(colored.levelname)
        if color:
            colored.levelname = f"{color}{colored.levelname}{self.RESET}"
        return super().format(colored)


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    use_colors: Optional[bool] = None
) -> None:
    """
    Configure application logging. Safe to call more than once.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)
        format_string: Custom format string (optional)
        use_colors: Force colors on/off; by default only when stdout is a TTY
    """
    if use_colors is None:
        use_colors = sys.stdout.isatty()

    formatter_class = ColoredFormatter if use_colors else logging.Formatter
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter_class(format_string or DEFAULT_FORMAT, datefmt="%H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.getLevelName(level.upper()))
    root_logger.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Usage:
        from core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


# === Log event helpers ===

def log_transition(
    logger: logging.Logger,
    student_id: int,
    old: str,
    new: str,
    detail: str = None,
):
    """Log a training profile status change."""
    msg = f"[Training] Student {student_id}: {old} -> {new}"
    if detail:
        msg = f"{msg} ({detail})"
    logger.log(logging.WARNING if new == "error" else logging.INFO, msg)


def log_decision(logger: logging.Logger, student_id: Optional[int], result) -> None:
    """Log a verification decision (a VerificationResult)."""
    logger.info(
        f"[Verify] student={student_id} path={result.path.value} "
        f"decision={result.decision.value} score={result.score:.4f} "
        f"threshold={result.threshold if result.threshold is not None else '-'}"
    )


def log_error(logger: logging.Logger, error: Exception, context: str = None):
    """Log an error with traceback and optional context."""
    msg = f"{type(error).__name__}: {error}"
    if context:
        msg = f"[{context}] {msg}"
    logger.error(msg, exc_info=error)
