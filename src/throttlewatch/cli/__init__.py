"""
Command-line interface for the throttlewatch package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
