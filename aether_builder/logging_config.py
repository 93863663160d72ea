from __future__ import annotations

"""Central logging configuration for Aether Builder.

Import and call :func:`setup_logging` once at host start-up.  The core never
configures logging on its own; it only emits through module loggers.
"""

import logging
import logging.config
import os
from typing import Any, Dict

from aether_builder.config import ConfigManager

__all__ = ["setup_logging"]

_MOVEMENT_LOGGERS = (
    "aether_builder.core.services.reparent_resolver",
    "aether_builder.core.services.structure_editing_service",
)


def setup_logging() -> None:
    """Configure logging using the ``logging`` section of the configuration."""
    log_dir = os.environ.get("AETHER_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    logging_config: Dict[str, Any] = dict(ConfigManager().get_logging_config())

    if logging_config.get("version"):
        handlers = dict(logging_config.get("handlers") or {})
        if "file" in handlers:
            handlers["file"] = dict(handlers["file"], filename=log_file)
        logging_config["handlers"] = handlers
        try:
            logging.config.dictConfig(logging_config)
            logging.info("===== Logging initialised from config files =====")
        except (ValueError, TypeError, AttributeError, ImportError) as exc:
            _setup_minimal_logging()
            logging.error("Invalid logging config, using minimal fallback: %s", exc)
    else:
        _setup_minimal_logging()
        logging.error("===== Logging initialised with minimal fallback (no config) =====")

    _apply_debug_overrides()


def _setup_minimal_logging() -> None:
    """Set up console-only logging when the configured schema is unusable."""
    minimal_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': 'INFO',
            },
        },
        'root': {
            'level': 'INFO',
            'handlers': ['console'],
        },
    }
    logging.config.dictConfig(minimal_config)


def _apply_debug_overrides() -> None:
    """Apply environment-driven module-specific debug overrides.

    Supports:
    - AETHER_DEBUG_MOVEMENT=true  -> DEBUG for drag/reparent resolution
    - AETHER_DEBUG_MODULES=comma,separated,logger,names -> DEBUG for listed loggers
    """
    debug_movement = os.environ.get('AETHER_DEBUG_MOVEMENT', '').strip().lower() in {'1', 'true', 'yes', 'on'}
    extra_modules = os.environ.get('AETHER_DEBUG_MODULES', '').strip()
    targets = []
    if debug_movement:
        targets.extend(_MOVEMENT_LOGGERS)
    if extra_modules:
        targets.extend([m.strip() for m in extra_modules.split(',') if m.strip()])

    for name in targets:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        # Ensure at least one handler emits DEBUG for this logger
        has_debug_handler = any(h.level <= logging.DEBUG for h in logger.handlers)
        if not has_debug_handler:
            h = logging.StreamHandler()
            h.setLevel(logging.DEBUG)
            h.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(h)
        logger.info("Debug override active for logger '%s'", name)
