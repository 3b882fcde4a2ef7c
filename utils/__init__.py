"""
Utility modules for the intake service.
"""

from .config import Config
from .logging import setup_logging

__all__ = ["Config", "setup_logging"]
