"""
Centralized logging setup for cloud resource discovery.

Every component logs below the ``cloud_discovery`` logger: discoverers use
``cloud_discovery.<service>``, exporters ``cloud_discovery.exporter.<format>``
and the graph ``cloud_discovery.graph``. Only the root gets handlers.
"""

import logging
import platform
import sys
import time
from pathlib import Path
from typing import Optional

import boto3

ROOT_LOGGER = "cloud_discovery"

CONSOLE_FORMAT = '%(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

NOISY_LOGGERS = ('boto3', 'botocore', 'urllib3', 's3transfer')


def _handler(handler: logging.Handler, level: str, fmt: str, datefmt: str = None) -> logging.Handler:
    handler.setLevel(level.upper())
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def setup_logging(log_level: str = "INFO", console_level: str = "INFO", file_level: str = "DEBUG",
                  log_file: Optional[Path] = None, logger_name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Attach a console handler, and a file handler if log_file is given, to the discovery logger.

    Handlers from an earlier call are closed and replaced, so an engine can be
    created more than once per process.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level.upper())
    logger.propagate = False

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.addHandler(_handler(logging.StreamHandler(sys.stdout), console_level, CONSOLE_FORMAT))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding='utf-8'),
                                   file_level, FILE_FORMAT, '%Y-%m-%d %H:%M:%S'))

    return logger


def configure_third_party_loggers(level: int = logging.WARNING):
    """Keep the AWS SDK from flooding the discovery log"""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def log_system_info(logger: logging.Logger):
    logger.info("🖥️  Environment:")
    logger.info(f"   Python {platform.python_version()} on {platform.platform()}")
    logger.info(f"   boto3 {boto3.__version__}")


def log_configuration(logger: logging.Logger, config):
    """Log the settings a discovery run uses"""
    logger.info("⚙️  Settings:")
    logger.info(f"   Region: {config.region or 'session default'}, Profile: {config.profile or 'default'}")
    logger.info(f"   Parallel Discoverers: {config.max_workers}")
    logger.info(f"   Services: {config.service_filter or 'all'}")

    if config.include_types:
        logger.info(f"   Only Types: {', '.join(config.include_types)}")
    if config.exclude_types:
        logger.info(f"   Without Types: {', '.join(config.exclude_types)}")
    if config.types_config:
        logger.info(f"   Type Filter File: {config.types_config}")

    logger.info(f"   Output: {', '.join(config.output_formats)}"
                f"{' + one file per resource' if config.individual_descriptions else ''}")


class ProgressLogger:
    """Logs progress of a batch in steps of at least 10%"""

    STEP = 10.0

    def __init__(self, logger: logging.Logger, total_items: int, operation_name: str = "Processing"):
        self.logger = logger
        self.total = total_items
        self.name = operation_name
        self.done = 0
        self._last_logged = 0.0

    def update(self, increment: int = 1):
        self.done += increment
        if not self.total:
            return

        percent = 100.0 * self.done / self.total
        if percent - self._last_logged >= self.STEP or self.done == self.total:
            self.logger.info(f"📈 {self.name}: {self.done}/{self.total} ({percent:.1f}%)")
            self._last_logged = percent


class TimedLogger:
    """
    Context manager logging the start and duration of an operation.

    The measured time is available as ``duration`` after the block exits.
    Exceptions are logged and propagate.
    """

    def __init__(self, logger: logging.Logger, operation_name: str):
        self.logger = logger
        self.name = operation_name
        self.duration = None
        self._started = None

    def __enter__(self):
        self._started = time.monotonic()
        self.logger.info(f"🚀 {self.name} started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.monotonic() - self._started
        if exc_type is None:
            self.logger.info(f"✅ {self.name} finished in {self.duration:.2f}s")
        else:
            self.logger.error(f"❌ {self.name} failed after {self.duration:.2f}s: {exc_val}")
        return False
