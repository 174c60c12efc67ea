"""Logging configuration for the command line and the extractor factory."""

import logging

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'


def setup_logging(level: str = 'WARNING') -> None:
    """Send ``hbs_xgettext`` log records to stderr at the given level."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%dT%H:%M:%S'))

    package_logger = logging.getLogger('hbs_xgettext')
    package_logger.setLevel(log_level)
    package_logger.handlers = [handler]


__all__ = ['setup_logging']
