"""Logging utility module"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from config import LOGGING_CONFIG


class SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that degrades to ASCII when the console cannot encode a message"""

    def emit(self, record):
        try:
            msg = self.format(record)
            try:
                self.stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                msg_clean = msg.encode('ascii', errors='ignore').decode('ascii')
                self.stream.write(msg_clean + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logger(name: str = "signal_engine", level: str = None) -> logging.Logger:
    """
    Setup logger with file and console handlers

    Args:
        name: Logger name
        level: Logging level (defaults to config)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger  # Already configured

    level = level or LOGGING_CONFIG["LEVEL"]
    logger.setLevel(getattr(logging, level.upper()))

    formatter = logging.Formatter(LOGGING_CONFIG["FORMAT"])

    console_handler = SafeStreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler with rotation
    log_file = LOGGING_CONFIG["FILE"]
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=LOGGING_CONFIG["MAX_BYTES"],
            backupCount=LOGGING_CONFIG["BACKUP_COUNT"],
        )
    except OSError as e:
        logger.warning(f"File logging disabled ({log_file}): {e}")
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
