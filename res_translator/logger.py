import logging
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Cache for log mode to avoid repeated config reads
_log_mode_cache = None


def _get_log_file() -> Path:
    from res_translator.config import get_app_home
    log_dir = get_app_home() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "app.log"


def _get_log_mode():
    """Get log mode (off|info|debug) from configuration."""
    global _log_mode_cache
    if _log_mode_cache is not None:
        return _log_mode_cache

    try:
        from res_translator.config import load_config
        log_mode = load_config().get('log_mode', 'off')
    except Exception:
        # Config not importable yet (logger created while config loads) or unreadable
        return 'off'
    _log_mode_cache = log_mode
    return log_mode


def _levels_for(log_mode: str):
    """Return (logger_level, console_level) for a log mode."""
    if log_mode == 'debug':
        return logging.DEBUG, logging.DEBUG
    if log_mode == 'off':
        # Higher than CRITICAL disables everything
        return logging.CRITICAL + 1, logging.CRITICAL + 1
    return logging.INFO, logging.INFO


def _configure(logger: logging.Logger, log_mode: str) -> None:
    logger_level, console_level = _levels_for(log_mode)
    logger.setLevel(logger_level)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    console_handlers = [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]

    if log_mode != 'off' and not file_handlers:
        try:
            f_handler = logging.FileHandler(_get_log_file(), encoding='utf-8')
        except OSError:
            f_handler = None
        if f_handler is not None:
            f_handler.setLevel(logging.DEBUG)
            f_handler.setFormatter(formatter)
            logger.addHandler(f_handler)
    elif log_mode == 'off':
        for handler in file_handlers:
            handler.close()
            logger.removeHandler(handler)

    if not console_handlers:
        c_handler = logging.StreamHandler()
        c_handler.setFormatter(formatter)
        logger.addHandler(c_handler)
        console_handlers = [c_handler]

    for handler in console_handlers:
        handler.setLevel(console_level)


def _clear_log_mode_cache():
    """Clear the log mode cache and reconfigure existing loggers (call after a config update)."""
    global _log_mode_cache
    _log_mode_cache = None

    log_mode = _get_log_mode()
    # Only loggers that have handlers were created by get_logger
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        if logger.handlers and logger_name.startswith('res_translator'):
            _configure(logger, log_mode)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    _configure(logger, _get_log_mode())
    return logger
