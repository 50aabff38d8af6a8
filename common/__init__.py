"""Common utilities for ircterm clients."""
from .config import get_config, configure_logger, load_config, parse_log_level

__all__ = ['get_config', 'configure_logger', 'load_config', 'parse_log_level']
