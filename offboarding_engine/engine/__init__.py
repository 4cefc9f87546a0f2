"""
Engine Package.

This package provides the state store for offboarding processes and the
checklist templates new processes are seeded from.
"""

from .state_manager import StateManager
from .templates import ChecklistTemplates

__all__ = [
    "ChecklistTemplates",
    "StateManager",
]
