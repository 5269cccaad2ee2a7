"""
Logging configuration for gravsim.

Engine modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves. Applications (the CLI, scripts) call ``setup_logging()``
once at startup:

    ```python
    from gravsim.utils.logging_config import setup_logging
    setup_logging("DEBUG")
    ```
"""

import logging
import logging.config
from pathlib import Path
from typing import Optional, Union


def setup_logging(default_level: Union[int, str] = logging.INFO, log_file: Optional[str] = None):
    """
    Setup logging configuration for gravsim.

    Parameters
    ----------
    default_level : int or str, optional
        Level for the ``gravsim`` logger. Default is logging.INFO.
    log_file : str, optional
        If given, DEBUG and above are also written to this rotating file.
    """
    if isinstance(default_level, str):
        level_name = default_level.upper()
        if not isinstance(logging.getLevelName(level_name), int):
            raise ValueError(f"Unknown log level: {default_level}")
        default_level = level_name

    handlers = ['console']
    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'standard',
                'stream': 'ext://sys.stderr',
            },
        },
        'loggers': {
            'gravsim': {
                'handlers': handlers,
                'level': default_level,
                'propagate': False
            },
        }
    }

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        config['handlers']['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'DEBUG',
            'formatter': 'detailed',
            'filename': str(log_file),
            'maxBytes': 10485760,  # 10 MB
            'backupCount': 5,
            'encoding': 'utf8'
        }
        handlers.append('file')

    logging.config.dictConfig(config)
    logging.getLogger(__name__).debug("Logging configuration applied")
