"""
Centralized Logging Configuration
Console output plus a size-rotated log file, both on the root logger.
"""
import logging
import logging.handlers
from pathlib import Path

# Marks handlers installed here so a second app in the same process replaces them
HANDLER_TAG = '_rcb_handler'

# Libraries that log every request or HTTP call at INFO
QUIET_LIBRARIES = ('werkzeug', 'urllib3', 'engineio', 'socketio', 'httpx', 'openai', 'anthropic')


def _tagged(handler, level, formatter):
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, HANDLER_TAG, True)
    return handler


def setup_logging(app):
    """
    Route all module loggers to the console and logs/<LOG_FILE>

    Args:
        app: Flask application instance

    Returns:
        The root logger
    """
    level = getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO)
    formatter = logging.Formatter(app.config['LOG_FORMAT'])

    log_dir = Path(app.config.get('LOG_DIR', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / app.config['LOG_FILE']

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Leave handlers owned by the host (pytest, gunicorn) in place
    for handler in list(root_logger.handlers):
        if getattr(handler, HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    root_logger.addHandler(_tagged(logging.StreamHandler(), level, formatter))
    root_logger.addHandler(_tagged(
        logging.handlers.RotatingFileHandler(log_path, maxBytes=10 * 1024 * 1024, backupCount=5),
        level,
        formatter
    ))

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    app.logger.info(f"Logging at {logging.getLevelName(level)} to console and {log_path}")
    return root_logger
