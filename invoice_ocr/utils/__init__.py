"""
Utility Module for the Invoice OCR Engine.

This module provides common utilities used across all other modules:
    - Logging configuration
    - File operations
    - Exception hierarchy
"""

from .logger import setup_logger, get_logger, setup_logger_from_config
from .helpers import ensure_directory, get_file_extension, collect_files

__all__ = [
    'setup_logger',
    'get_logger',
    'setup_logger_from_config',
    'ensure_directory',
    'get_file_extension',
    'collect_files'
]
