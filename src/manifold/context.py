import logging
import os
import sys
from dataclasses import dataclass

from decouple import AutoConfig

ENV_VAR_PREFIX = "MANIFOLD"
decouple_config = AutoConfig(search_path=os.getenv("MANIFOLD_SETTINGS_PATH", os.getcwd()))


@dataclass(frozen=True)
class Settings:
    """
    Defaults applied when a workspace configuration leaves a value out.

    Every value can be overridden through a `MANIFOLD_*` environment variable
    or a `.env` / `settings.ini` file picked up by python-decouple.
    """

    log_level: str = "INFO"
    log_format: str = "[%(asctime)s] %(levelname)s - %(name)s | %(message)s"
    log_datefmt: str = "%Y-%m-%d %H:%M:%S%z"
    timestamp_interval: str = "DAY"
    lookback_days: int = 90
    dataset_location: str = "US"
    google_provider_version: str = "~> 4.0"


def _setting(key: str, default, cast=str):
    return decouple_config(f"{ENV_VAR_PREFIX}_{key}", default=default, cast=cast)


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        log_level=_setting("LOG_LEVEL", defaults.log_level).upper(),
        log_format=_setting("LOG_FORMAT", defaults.log_format),
        log_datefmt=_setting("LOG_DATEFMT", defaults.log_datefmt),
        timestamp_interval=_setting(
            "TIMESTAMP_INTERVAL", defaults.timestamp_interval
        ).upper(),
        lookback_days=_setting("LOOKBACK_DAYS", defaults.lookback_days, cast=int),
        dataset_location=_setting("DATASET_LOCATION", defaults.dataset_location),
        google_provider_version=_setting(
            "GOOGLE_PROVIDER_VERSION", defaults.google_provider_version
        ),
    )


def _create_logger(name: str) -> logging.Logger:
    """
    Creates a logger with a `StreamHandler` that has level and formatting
    set from `manifold.context.settings`.

    Args:
        - name (str): Name to use for logger.

    Returns:
        - logging.Logger: a configured logging object
    """
    logger = logging.getLogger(name)

    formatter = logging.Formatter(settings.log_format, settings.log_datefmt)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    logger.setLevel(settings.log_level)

    return logger


def configure_logging(testing: bool = False) -> logging.Logger:
    """
    Creates the "manifold" root logger. With `testing` set a separate
    "manifold-test-logger" is configured so tests don't touch global state.
    """
    name = "manifold-test-logger" if testing else "manifold"

    return _create_logger(name)


def get_logger(name: str = None) -> logging.Logger:
    """
    Returns the root manifold logger, or a child logger named `name`.
    """
    if name is None:
        return manifold_logger
    return manifold_logger.getChild(name)


settings = load_settings()
manifold_logger = configure_logging()

logger = get_logger()
logger.propagate = False
