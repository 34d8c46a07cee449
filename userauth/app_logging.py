import logging
from pythonjsonlogger import jsonlogger

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def setup_logger(level: int = logging.INFO, json: bool = True) -> None:
    """Send log records from all loggers to stderr, once per process."""
    logger = logging.getLogger()
    logger.setLevel(level)
    if any(getattr(h, '_userauth', False) for h in logger.handlers):
        return
    logHandler = logging.StreamHandler()
    if json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(FORMAT)
    logHandler.setFormatter(formatter)
    logHandler._userauth = True  # type: ignore
    logger.addHandler(logHandler)
