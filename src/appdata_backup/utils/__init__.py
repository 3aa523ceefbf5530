"""Utility functions and helpers."""

from .file_utils import FileHelper
from .logging import get_logger, setup_logging

__all__ = ["FileHelper", "get_logger", "setup_logging"]
