"""Logging helpers for livesettings."""

from .logger import get_logger, is_verbose_logging, setup_logging

__all__ = ['get_logger', 'is_verbose_logging', 'setup_logging']
