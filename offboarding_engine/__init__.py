"""
Offboarding Engine

Employee offboarding workflow engine: a fixed nine-step separation
process with per-step completion gates, derived progress and a terminal
transition that ends the employee's employment.
"""

__version__ = "1.0.0"
__author__ = "Offboarding Engine Team"
__email__ = "team@example.com"

from .engine.state_manager import StateManager
from .engine.templates import ChecklistTemplates
from .exceptions import (
    ActiveProcessExistsError,
    OffboardingError,
    PersistenceError,
    ProcessClosedError,
    ProcessNotFoundError,
    StepValidationError,
)
from .workflows.offboarding import OffboardingEngine

__all__ = [
    "OffboardingEngine",
    "StateManager",
    "ChecklistTemplates",
    "OffboardingError",
    "StepValidationError",
    "ProcessNotFoundError",
    "ActiveProcessExistsError",
    "ProcessClosedError",
    "PersistenceError",
]
