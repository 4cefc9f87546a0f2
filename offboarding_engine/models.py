"""
Core data models for the Offboarding Engine.

This module defines the Pydantic models used throughout the system
for offboarding processes, their nine step records, employee records
and audit records.

Every model accepts both snake_case field names and their camelCase
aliases, so payloads coming from a browser client validate unchanged.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def short_id() -> str:
    """Random identifier for checklist entries created on the fly."""
    return uuid.uuid4().hex[:8]


class ProcessStatus(str, Enum):
    """Lifecycle status of an offboarding process."""
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SeparationType(str, Enum):
    """Why the employee is leaving."""
    RESIGNATION = "RESIGNATION"
    TERMINATION = "TERMINATION"


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TaskStatus(str, Enum):
    TODO = "TODO"
    DONE = "DONE"


class AssetCondition(str, Enum):
    GOOD = "GOOD"
    DAMAGED = "DAMAGED"
    LOST = "LOST"


class ClearanceStatus(str, Enum):
    PENDING = "PENDING"
    CLEARED = "CLEARED"


class EmploymentStatus(str, Enum):
    """Employment status held on the employee record."""
    ACTIVE = "ACTIVE"
    RESIGNED = "RESIGNED"
    TERMINATED = "TERMINATED"


class EngineModel(BaseModel):
    """Base model accepting camelCase aliases alongside field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StepRecord(EngineModel):
    """Fields shared by every step record."""
    is_completed: bool = False


# Step 1: Notice
class NoticeStep(StepRecord):
    type: SeparationType = SeparationType.RESIGNATION
    reason: str = ""
    submitted_at: Optional[datetime] = None
    last_working_date: Optional[date] = None
    attachments: List[str] = Field(default_factory=list, description="Download URLs")


# Step 2: Approval
class ApprovalStep(StepRecord):
    status: ApprovalStatus = ApprovalStatus.PENDING
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    comments: Optional[str] = None


# Step 3: Handover
class HandoverTask(EngineModel):
    id: str = Field(default_factory=short_id)
    task: str = ""
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[date] = None


class HandoverGroup(EngineModel):
    id: str = Field(default_factory=short_id)
    title: str = ""
    tasks: List[HandoverTask] = Field(default_factory=list)


class HandoverStep(StepRecord):
    groups: List[HandoverGroup] = Field(default_factory=list)
    # Flattened view of every group's tasks, rebuilt on each write
    tasks: List[HandoverTask] = Field(default_factory=list)

    def all_tasks(self) -> List[HandoverTask]:
        """Every task across every group, or the flat list for legacy records."""
        if self.groups:
            return [task for group in self.groups for task in group.tasks]
        return list(self.tasks)


# Step 4: Assets
class AssetItem(EngineModel):
    id: str = Field(default_factory=short_id)
    item: str = ""
    returned: bool = False
    condition: AssetCondition = AssetCondition.GOOD
    notes: Optional[str] = None


class AssetsStep(StepRecord):
    items: List[AssetItem] = Field(default_factory=list)


# Step 5: Exit interview
class ExitInterviewStep(StepRecord):
    conducted_at: Optional[datetime] = None
    interviewer_id: Optional[str] = None
    feedback: str = ""
    reasons: List[str] = Field(default_factory=list)

    @field_validator("reasons")
    @classmethod
    def dedupe_reasons(cls, v: List[str]) -> List[str]:
        """Reasons are a multi-select set; keep first occurrence order."""
        return list(dict.fromkeys(v))


# Step 6: Settlement
class SettlementItem(EngineModel):
    id: str = Field(default_factory=short_id)
    item: str = ""
    status: ClearanceStatus = ClearanceStatus.PENDING


class SettlementStep(StepRecord):
    salary_calculated: bool = False
    bonus_calculated: bool = False
    vacation_calculated: bool = False
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    checklist: List[SettlementItem] = Field(default_factory=list)


# Step 7: Documents
class DocumentAttachment(EngineModel):
    name: str
    url: str


class DocumentsStep(StepRecord):
    reference_letter_generated: bool = False
    social_insurance_book_returned: bool = False
    other_documents: List[DocumentAttachment] = Field(default_factory=list)


# Step 8: Deactivation
class SystemAccess(EngineModel):
    id: str = Field(default_factory=short_id)
    name: str = ""
    deactivated: bool = False
    deactivated_at: Optional[datetime] = None


class DeactivationStep(StepRecord):
    systems: List[SystemAccess] = Field(default_factory=list)


# Step 9: Farewell
class FarewellStep(StepRecord):
    message_sent: bool = False
    event_organized: bool = False
    notes: Optional[str] = None


class OffboardingProcess(EngineModel):
    """One employee separation event and the state of its nine steps."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    employee_id: str = Field(..., description="Employee being separated")
    status: ProcessStatus = ProcessStatus.IN_PROGRESS
    current_step: int = Field(1, ge=1, le=9, description="Step presented to the user")
    started_at: datetime = Field(default_factory=utc_now)
    started_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    notice: NoticeStep = Field(default_factory=NoticeStep)
    approval: ApprovalStep = Field(default_factory=ApprovalStep)
    handover: HandoverStep = Field(default_factory=HandoverStep)
    assets: AssetsStep = Field(default_factory=AssetsStep)
    exit_interview: ExitInterviewStep = Field(default_factory=ExitInterviewStep)
    settlement: SettlementStep = Field(default_factory=SettlementStep)
    documents: DocumentsStep = Field(default_factory=DocumentsStep)
    deactivation: DeactivationStep = Field(default_factory=DeactivationStep)
    farewell: FarewellStep = Field(default_factory=FarewellStep)

    @property
    def is_active(self) -> bool:
        return self.status == ProcessStatus.IN_PROGRESS


class EmployeeRecord(EngineModel):
    """The slice of an employee record the offboarding flow touches."""
    employee_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    title: Optional[str] = None
    status: EmploymentStatus = EmploymentStatus.ACTIVE
    employment_end_date: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        """Basic email validation."""
        if v is not None and "@" not in v:
            raise ValueError("Invalid email format")
        return v


class AuditRecord(BaseModel):
    """Audit record for every state change made through the engine."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=utc_now)
    event_type: str = Field(..., description="start, save, complete, navigate, cancel, finish")
    employee_id: str
    process_id: str
    step_index: Optional[int] = Field(None, description="Step affected, if any")
    action: str = Field(..., description="Specific action taken")
    success: bool = Field(..., description="Whether the action was applied")
    error_message: Optional[str] = Field(None, description="Error details if rejected")
    actor: Optional[str] = Field(None, description="User who performed the action")
    metadata: Dict[str, Any] = Field(default_factory=dict)


# Type aliases for convenience
OffboardingProcesses = List[OffboardingProcess]
AuditRecords = List[AuditRecord]
