"""
System interaction utilities.

- Command execution with captured output, used by the event-log thermal
  counter
- Synthetic CPU load to provoke boost and throttling during a session
"""

from .commands import is_command_available, run_command
from .load import LoadGenerator

__all__ = ["is_command_available", "run_command", "LoadGenerator"]
