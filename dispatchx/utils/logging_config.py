import logging
import sys
from typing import Optional

from dispatchx.config.settings import Settings, get_settings


CONSOLE_HANDLER_NAME = "dispatchx.console"


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Configure application-wide logging."""
    settings = settings or get_settings()
    if settings.debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Reuse our console handler on repeated calls
    console_handler = next(
        (h for h in root_logger.handlers if h.get_name() == CONSOLE_HANDLER_NAME),
        None,
    )
    if console_handler is None:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        root_logger.addHandler(console_handler)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    return root_logger
