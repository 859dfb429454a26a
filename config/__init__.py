"""
Configuration module for the BookForge markup engine.
"""
from .constants import *
from .settings import Settings, settings
from .logging_config import setup_logger, get_logger, logger

__all__ = [
    # Settings
    'Settings',
    'settings',
    # Logging
    'setup_logger',
    'get_logger',
    'logger',
    # Constants (all exported via *)
]
