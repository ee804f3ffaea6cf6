"""Logging and console helpers."""

from .logging import setup_logging
from .progress import ProgressReporter

__all__ = ['setup_logging', 'ProgressReporter']
