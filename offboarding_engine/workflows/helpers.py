"""
Workflow Helper Functions for the Offboarding Engine.

Derived values computed from an offboarding process: which steps are
completed, task progress, the employment status the process ends in,
and summaries for the API and CLI.
"""

import logging
import math
from typing import Any, Dict, List

from ..models import (
    EmploymentStatus,
    HandoverGroup,
    HandoverStep,
    OffboardingProcess,
    SeparationType,
    TaskStatus,
)
from .steps import STEPS, get_step

logger = logging.getLogger(__name__)

DEFAULT_HANDOVER_GROUP_ID = "default"
DEFAULT_HANDOVER_GROUP_TITLE = "Main tasks"


def completed_steps(process: OffboardingProcess) -> List[int]:
    """
    Get the indices of all completed steps.

    The result is not necessarily a prefix of 1..9: steps submitted out of
    order through direct navigation are reported as they are.

    Args:
        process: The offboarding process

    Returns:
        Sorted list of step indices whose record is completed
    """
    return [step.index for step in STEPS if step.get_record(process).is_completed]


def progress_percent(done: int, total: int) -> int:
    """
    Percentage of done items, rounded half up.

    An empty list counts as fully done.
    """
    if total <= 0:
        return 100
    return int(math.floor(100 * done / total + 0.5))


def handover_progress(process: OffboardingProcess) -> int:
    """Progress of the handover step's tasks."""
    tasks = process.handover.all_tasks()
    done = len([t for t in tasks if t.status == TaskStatus.DONE])
    return progress_percent(done, len(tasks))


def normalize_handover(record: HandoverStep) -> HandoverStep:
    """
    Keep the handover groups and the flattened task list in sync.

    Legacy records carry only ``tasks``; those are wrapped into a single
    default group. The flat list is always rebuilt from the groups.
    """
    if not record.groups and record.tasks:
        record.groups = [
            HandoverGroup(
                id=DEFAULT_HANDOVER_GROUP_ID,
                title=DEFAULT_HANDOVER_GROUP_TITLE,
                tasks=list(record.tasks),
            )
        ]
    record.tasks = [task for group in record.groups for task in group.tasks]
    return record


def derive_employment_status(process: OffboardingProcess) -> EmploymentStatus:
    """Terminal employment status implied by the notice type."""
    if process.notice.type == SeparationType.RESIGNATION:
        return EmploymentStatus.RESIGNED
    return EmploymentStatus.TERMINATED


def create_process_summary(process: OffboardingProcess) -> Dict[str, Any]:
    """
    Create a summary of an offboarding process for display.

    Args:
        process: The offboarding process

    Returns:
        Dictionary with the process summary
    """
    done = completed_steps(process)
    current = get_step(process.current_step)

    return {
        "process_id": process.id,
        "employee_id": process.employee_id,
        "status": process.status.value,
        "current_step": current.index,
        "current_step_key": current.key,
        "current_step_label": current.label,
        "completed_steps": done,
        "overall_progress": progress_percent(len(done), len(STEPS)),
        "handover_progress": handover_progress(process),
        "started_at": process.started_at.isoformat() if process.started_at else None,
        "completed_at": process.completed_at.isoformat() if process.completed_at else None,
    }
