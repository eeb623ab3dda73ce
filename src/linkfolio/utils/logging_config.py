"""
Centralized logging configuration for LinkFolio.
Provides component-specific loggers with optional separate log files.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Dict, Any

LOGGER_NAMESPACE = "linkfolio"

DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - "
    "%(funcName)s() - %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class ComponentLogger:
    """Manages component-specific logging."""

    _loggers: Dict[str, logging.Logger] = {}
    _initialized = False
    _log_dir: Optional[Path] = None
    _level: int = logging.INFO
    _unified_handler: Optional[logging.Handler] = None

    # Component definitions with their log files
    COMPONENTS = {
        "api": {"level": logging.INFO, "file": "api.log"},
        "analytics": {"level": logging.INFO, "file": "analytics.log"},
        "auth": {"level": logging.INFO, "file": "auth.log"},
        "database": {"level": logging.INFO, "file": "database.log"},
        "main": {"level": logging.INFO, "file": "main.log"},
        "error": {"level": logging.ERROR, "file": "errors.log"},  # Centralized error log
    }

    @classmethod
    def initialize(
        cls,
        log_dir: Optional[str] = None,
        debug: bool = False,
        log_to_file: bool = False,
        level: str = "INFO",
    ) -> None:
        """
        Initialize the logging system with component-specific loggers.

        Args:
            log_dir: Directory for log files (only used with ``log_to_file``)
            debug: Enable debug logging for all components
            log_to_file: Write rotating per-component files plus ``unified.log``
            level: Base level name when not in debug mode
        """
        if cls._initialized:
            cls.reset()

        cls._level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

        if log_to_file:
            cls._log_dir = Path(log_dir or "logs")
            cls._log_dir.mkdir(parents=True, exist_ok=True)
            cls._unified_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / "unified.log",
                maxBytes=20 * 1024 * 1024,  # 20MB
                backupCount=3,
                encoding="utf-8",
            )
            cls._unified_handler.setLevel(cls._level)
            cls._unified_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))

        for component_name in cls.COMPONENTS:
            cls._create_component_logger(component_name)

        cls._initialized = True

        main_logger = cls._loggers["main"]
        main_logger.debug("LinkFolio logging system initialized")
        if cls._log_dir:
            main_logger.info(f"Log directory: {cls._log_dir}")

    @classmethod
    def _create_component_logger(cls, component: str) -> logging.Logger:
        """Create (or reconfigure) the logger for a component."""
        logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{component}")
        logger.handlers.clear()
        logger.propagate = False

        component_config = cls.COMPONENTS.get(component, {})
        level = min(cls._level, component_config.get("level", cls._level))
        if component == "error":
            level = logging.ERROR
        logger.setLevel(level)

        if cls._log_dir is not None:
            file_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / component_config.get("file", f"{component}.log"),
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
            logger.addHandler(file_handler)
            if cls._unified_handler is not None:
                logger.addHandler(cls._unified_handler)
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
            logger.addHandler(console_handler)

        cls._loggers[component] = logger
        return logger

    @classmethod
    def get_logger(cls, component: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            component: Component name (api, analytics, auth, database, ...)
                      Can also be a module path like 'linkfolio.api.links'

        Returns:
            Logger instance for the component
        """
        if not cls._initialized:
            cls.initialize()

        if component.startswith(f"{LOGGER_NAMESPACE}."):
            component = cls._component_for_module(component)

        logger = cls._loggers.get(component)
        if logger is None:
            logger = cls._create_component_logger(component)
        return logger

    @staticmethod
    def _component_for_module(module_name: str) -> str:
        """Map a module ``__name__`` to its component."""
        parts = module_name.split(".")
        if len(parts) < 2:
            return "main"
        package = parts[1]
        if package in ("api", "analytics", "auth"):
            return package
        if package in ("db", "repositories"):
            return "database"
        return "main"

    @classmethod
    def log_exception(
        cls, component: str, exc: BaseException, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an exception with context to both component and error logs.

        Args:
            component: Component where the exception occurred
            exc: The exception to log
            context: Additional context information
        """
        component_logger = cls.get_logger(component)
        error_logger = cls.get_logger("error")

        context_str = ""
        if context:
            context_str = " | Context: " + ", ".join(f"{k}={v}" for k, v in context.items())

        component_logger.error(
            f"Exception in {component}: {type(exc).__name__}: {exc}{context_str}",
            exc_info=exc,
        )
        error_logger.error(
            f"[{component}] {type(exc).__name__}: {exc}{context_str}", exc_info=exc
        )

    @classmethod
    def get_log_directory(cls) -> Optional[Path]:
        """Get the current log directory path."""
        return cls._log_dir

    @classmethod
    def reset(cls) -> None:
        """Drop all handlers so the next call re-initializes."""
        for logger in cls._loggers.values():
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                if handler is not cls._unified_handler:
                    handler.close()
        if cls._unified_handler is not None:
            cls._unified_handler.close()
        cls._loggers = {}
        cls._unified_handler = None
        cls._log_dir = None
        cls._initialized = False


# Convenience functions
def get_logger(component: str) -> logging.Logger:
    """Get a logger for a specific component."""
    return ComponentLogger.get_logger(component)


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a module using its __name__.

    Example:
        logger = get_module_logger(__name__)
    """
    return ComponentLogger.get_logger(module_name)


def initialize_logging(
    log_dir: Optional[str] = None,
    debug: bool = False,
    log_to_file: bool = False,
    level: str = "INFO",
) -> None:
    """Initialize the logging system."""
    ComponentLogger.initialize(
        log_dir=log_dir, debug=debug, log_to_file=log_to_file, level=level
    )


def log_exception(
    component: str, exc: BaseException, context: Optional[Dict[str, Any]] = None
) -> None:
    """Log an exception with context."""
    ComponentLogger.log_exception(component, exc, context)


def get_log_directory() -> Optional[Path]:
    """Get the current log directory path."""
    return ComponentLogger.get_log_directory()
