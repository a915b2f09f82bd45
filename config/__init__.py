"""
Configuration module for the WorkLedger report core.
"""
from .constants import *
from .logging_config import setup_logger, get_logger
from .settings import Settings, get_settings

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Settings
    'Settings',
    'get_settings',
    # Constants (all exported via *)
]
