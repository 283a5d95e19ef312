import logging
import os
import sys
from logging.handlers import RotatingFileHandler

ROOT_LOGGER = 'nats_sub'

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'error': logging.ERROR,
}

FILE_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
CONSOLE_FORMAT = '%(asctime)s %(message)s'
CONSOLE_DATEFMT = '%Y/%m/%d %H:%M:%S'


class LevelFilter(logging.Filter):
    def __init__(self, level):
        super().__init__()
        self.level = level
    def filter(self, record):
        return record.levelno == self.level


def _console_level() -> int:
    name = os.getenv('NATS_SUB_LOG_LEVEL', 'info').strip().lower()
    return LOG_LEVELS.get(name, logging.INFO)


def _file_handlers(log_dir):
    os.makedirs(log_dir, exist_ok=True)
    handlers = []
    # Handler por nivel
    for level_name, level in LOG_LEVELS.items():
        handler = RotatingFileHandler(
            os.path.join(log_dir, f'{level_name}.log'),
            maxBytes=5*1024*1024,  # 5MB por archivo
            backupCount=3
        )
        handler.setLevel(level)
        handler.addFilter(LevelFilter(level))
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(handler)
    return handlers


def _setup_root():
    logger = logging.getLogger(ROOT_LOGGER)
    if getattr(logger, '_custom_handlers', False):
        return logger
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # stderr: stdout queda reservado para los mensajes recibidos
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_console_level())
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    logger.addHandler(console)

    log_dir = os.getenv('NATS_SUB_LOG_DIR')
    if log_dir:
        for handler in _file_handlers(os.path.abspath(log_dir)):
            logger.addHandler(handler)

    logger._custom_handlers = True
    return logger


def get_logger(name=ROOT_LOGGER):
    """Logger del paquete; los módulos piden get_logger(__name__) y heredan los handlers."""
    root = _setup_root()
    if name == ROOT_LOGGER:
        return root
    if not name.startswith(ROOT_LOGGER + '.'):
        name = f'{ROOT_LOGGER}.{name}'
    return logging.getLogger(name)
