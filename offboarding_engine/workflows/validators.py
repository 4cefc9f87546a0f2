"""
Step Completion Validators for the Offboarding Engine.

Each validator receives the candidate step record and the process it
belongs to, and returns a list of validation error messages. An empty
list means the step may be marked complete.
"""

import logging
from typing import List

from ..models import (
    ApprovalStep,
    AssetsStep,
    ClearanceStatus,
    DeactivationStep,
    DocumentsStep,
    ExitInterviewStep,
    FarewellStep,
    HandoverStep,
    NoticeStep,
    OffboardingProcess,
    SettlementStep,
    TaskStatus,
)

logger = logging.getLogger(__name__)


def validate_notice(record: NoticeStep, process: OffboardingProcess) -> List[str]:
    """
    Validate the notice step.

    Args:
        record: Candidate notice record
        process: Process the record belongs to

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if record.last_working_date is None:
        errors.append("Last working date is required")

    if not record.reason or not record.reason.strip():
        errors.append("Reason is required")

    return errors


def validate_approval(record: ApprovalStep, process: OffboardingProcess) -> List[str]:
    """The approval decision can only be recorded once the notice is complete."""
    if not process.notice.is_completed:
        return ["Notice step must be completed before approval"]
    return []


def validate_handover(record: HandoverStep, process: OffboardingProcess) -> List[str]:
    """Every handover task must be DONE; no tasks at all is fine."""
    pending = [t for t in record.all_tasks() if t.status != TaskStatus.DONE]
    if pending:
        return [f"{len(pending)} handover task(s) are not done"]
    return []


def validate_assets(record: AssetsStep, process: OffboardingProcess) -> List[str]:
    not_returned = [i.item or i.id for i in record.items if not i.returned]
    if not_returned:
        return [f"Assets not returned: {', '.join(not_returned)}"]
    return []


def validate_exit_interview(record: ExitInterviewStep, process: OffboardingProcess) -> List[str]:
    if not record.feedback or not record.feedback.strip():
        return ["Exit interview feedback is required"]
    return []


def validate_settlement(record: SettlementStep, process: OffboardingProcess) -> List[str]:
    """
    Validate the settlement step.

    All clearance items must be CLEARED, and the final salary and vacation
    calculations must both be done. The bonus calculation is optional.
    """
    errors = []

    pending = [i.item or i.id for i in record.checklist if i.status != ClearanceStatus.CLEARED]
    if pending:
        errors.append(f"Clearance items pending: {', '.join(pending)}")

    if not record.salary_calculated:
        errors.append("Final salary has not been calculated")

    if not record.vacation_calculated:
        errors.append("Vacation pay has not been calculated")

    return errors


def validate_documents(record: DocumentsStep, process: OffboardingProcess) -> List[str]:
    if not record.social_insurance_book_returned:
        return ["Social insurance book must be returned"]
    return []


def validate_deactivation(record: DeactivationStep, process: OffboardingProcess) -> List[str]:
    active = [s.name or s.id for s in record.systems if not s.deactivated]
    if active:
        return [f"System access still active: {', '.join(active)}"]
    return []


def validate_farewell(record: FarewellStep, process: OffboardingProcess) -> List[str]:
    return []
