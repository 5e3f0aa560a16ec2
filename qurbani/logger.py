"""
Logging del servicio: formato único y nivel tomado del entorno.

QURBANI_LOG_LEVEL tiene prioridad; LOG_LEVEL queda como alternativa
para despliegues que comparten la variable con otros servicios.
"""
import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def log_level() -> str:
    return (os.getenv("QURBANI_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").upper()


def get_logger(name: str) -> logging.Logger:
    """
    Return a configured logger. Initializes basicConfig once.
    """
    level = log_level()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
