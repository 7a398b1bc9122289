import logging
from typing import Optional

from pythonjsonlogger import jsonlogger


def setup_logger(level: int = logging.INFO,
                 logfile: Optional[str] = None) -> None:
    if logfile:
        logHandler: logging.Handler = logging.FileHandler(logfile)
    else:
        logHandler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s',
                                         rename_fields={'levelname': 'level', 'asctime': 'timestamp'})
    logHandler.setFormatter(formatter)
    logger = logging.getLogger('advocate')
    if not any(isinstance(h.formatter, jsonlogger.JsonFormatter)
               for h in logger.handlers):
        logger.addHandler(logHandler)
    logger.setLevel(level)
