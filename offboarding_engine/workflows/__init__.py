"""
Workflows Package for the Offboarding Engine.

This package provides the offboarding step table, the per-step
completion validators and the engine that drives a process through them.
"""

from .helpers import (
    completed_steps,
    create_process_summary,
    derive_employment_status,
    handover_progress,
    normalize_handover,
    progress_percent,
)
from .offboarding import TERMINATION_ORDER_NAME, OffboardingEngine
from .steps import FIRST_STEP, LAST_STEP, STEPS, StepDefinition, get_step, get_step_by_key

__all__ = [
    "OffboardingEngine",
    "StepDefinition",
    "STEPS",
    "FIRST_STEP",
    "LAST_STEP",
    "TERMINATION_ORDER_NAME",
    "get_step",
    "get_step_by_key",
    "completed_steps",
    "progress_percent",
    "handover_progress",
    "normalize_handover",
    "derive_employment_status",
    "create_process_summary",
]
