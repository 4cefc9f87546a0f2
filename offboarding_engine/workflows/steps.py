"""
Offboarding Step Table.

The nine offboarding steps, in order. This table is the only place the
step sequence is defined: the engine, the API and the CLI all look steps
up here instead of repeating the 1-9 mapping.
"""

from typing import Callable, List, NamedTuple, Type

from ..models import (
    ApprovalStep,
    AssetsStep,
    DeactivationStep,
    DocumentsStep,
    ExitInterviewStep,
    FarewellStep,
    HandoverStep,
    NoticeStep,
    OffboardingProcess,
    SettlementStep,
    StepRecord,
)
from . import validators

FIRST_STEP = 1
LAST_STEP = 9


class StepDefinition(NamedTuple):
    """One row of the step table."""
    index: int
    key: str
    attribute: str
    label: str
    model: Type[StepRecord]
    validator: Callable[[StepRecord, OffboardingProcess], List[str]]

    def get_record(self, process: OffboardingProcess) -> StepRecord:
        """Return this step's record from a process."""
        return getattr(process, self.attribute)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "key": self.key,
            "attribute": self.attribute,
            "label": self.label,
        }


STEPS = (
    StepDefinition(1, "NOTICE", "notice", "Notice", NoticeStep, validators.validate_notice),
    StepDefinition(2, "APPROVAL", "approval", "Approval", ApprovalStep, validators.validate_approval),
    StepDefinition(3, "HANDOVER", "handover", "Handover", HandoverStep, validators.validate_handover),
    StepDefinition(4, "ASSETS", "assets", "Asset return", AssetsStep, validators.validate_assets),
    StepDefinition(
        5, "EXIT_INTERVIEW", "exit_interview", "Exit interview",
        ExitInterviewStep, validators.validate_exit_interview,
    ),
    StepDefinition(
        6, "SETTLEMENT", "settlement", "Settlement",
        SettlementStep, validators.validate_settlement,
    ),
    StepDefinition(7, "DOCUMENTS", "documents", "Documents", DocumentsStep, validators.validate_documents),
    StepDefinition(
        8, "DEACTIVATION", "deactivation", "System deactivation",
        DeactivationStep, validators.validate_deactivation,
    ),
    StepDefinition(9, "FAREWELL", "farewell", "Farewell", FarewellStep, validators.validate_farewell),
)


def get_step(index: int) -> StepDefinition:
    """
    Look up a step by its 1-based index.

    Raises:
        ValueError: if the index is outside [1, 9]
    """
    if not isinstance(index, int) or isinstance(index, bool) or not FIRST_STEP <= index <= LAST_STEP:
        raise ValueError(f"Step index must be between {FIRST_STEP} and {LAST_STEP}, got {index!r}")
    return STEPS[index - 1]


def get_step_by_key(key: str) -> StepDefinition:
    """Look up a step by its key (``NOTICE``) or attribute name (``notice``)."""
    for step in STEPS:
        if key in (step.key, step.attribute):
            return step
    raise ValueError(f"Unknown offboarding step: {key}")
