from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

from keyobject_lib.config import DEFAULT_CONFIG_PATH


def configure_logging(config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for the KeyObject server.

    An early NOTSET basic config lets imports emit while the YAML config is
    read; the root logger is then reconfigured to the `log_level` found there
    (WARNING when absent or unreadable). Returns a module logger for the caller.
    """
    logging.basicConfig(level=logging.NOTSET, format='%(asctime)s INFO %(message)s')
    DEFAULT_LOG_LEVEL = logging.WARNING

    cfg_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if cfg_path.exists():
        try:
            with cfg_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
                _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
                if isinstance(_lvl, str):
                    _numeric = getattr(logging, _lvl.upper(), None)
                    if isinstance(_numeric, int):
                        DEFAULT_LOG_LEVEL = _numeric
        except (OSError, yaml.YAMLError):
            logging.exception('Failed to read log level from %s', cfg_path)
            DEFAULT_LOG_LEVEL = logging.WARNING

    logging.log(100, f'[keyobject]: Log level set to: {logging.getLevelName(DEFAULT_LOG_LEVEL)}')

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=DEFAULT_LOG_LEVEL, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('ydb').setLevel(logging.WARNING)
    logging.getLogger('grpc').setLevel(logging.WARNING)
    logging.getLogger('aiosqlite').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logger.info("Starting KeyObject Server")

    return logger
