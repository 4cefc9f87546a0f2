"""
Offboarding Workflow for the Offboarding Engine.

Drives an employee separation through the nine offboarding steps:
starting a process, saving and completing steps behind their completion
gates, moving the current step pointer, cancelling, and closing the
process and the employee's employment when the last step completes.
"""

import logging
from datetime import datetime, time, timezone
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..audit import AttachmentStore, AuditLogger
from ..engine import ChecklistTemplates, StateManager
from ..exceptions import (
    ActiveProcessExistsError,
    PersistenceError,
    ProcessClosedError,
    ProcessNotFoundError,
    StepValidationError,
)
from ..models import (
    ApprovalStatus,
    ApprovalStep,
    AssetsStep,
    AuditRecord,
    DeactivationStep,
    DocumentAttachment,
    DocumentsStep,
    ExitInterviewStep,
    HandoverStep,
    NoticeStep,
    OffboardingProcess,
    ProcessStatus,
    SettlementStep,
    StepRecord,
    utc_now,
)
from .helpers import completed_steps, derive_employment_status, normalize_handover
from .steps import LAST_STEP, StepDefinition, get_step

logger = logging.getLogger(__name__)

TERMINATION_ORDER_NAME = "Termination order"

ProcessRef = Union[str, OffboardingProcess]
Attachment = Tuple[str, bytes]


class OffboardingEngine:
    """
    Engine for employee offboarding processes.

    Every operation re-reads the authoritative process record from the
    state manager, applies one change and writes it back, so no state is
    carried between calls.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        state_manager: Optional[StateManager] = None,
        audit_logger: Optional[AuditLogger] = None,
        attachment_store: Optional[AttachmentStore] = None,
        templates: Optional[ChecklistTemplates] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Configuration dictionary (state_file, audit_dir,
                    attachments_dir, templates_file)
            state_manager: Process store to use instead of one built from config
            audit_logger: Audit logger to use instead of one built from config
            attachment_store: Attachment store to use instead of one built from config
            templates: Checklist templates to use instead of loading templates_file
        """
        self.config = config or {}

        self.state_manager = state_manager or StateManager(self.config.get("state_file"))
        self.audit_logger = audit_logger or AuditLogger(self.config.get("audit_dir", "audit"))
        self.attachment_store = attachment_store or AttachmentStore(
            self.config.get("attachments_dir", "attachments")
        )
        self.templates = templates or ChecklistTemplates(self.config.get("templates_file"))

        logger.info(f"Initialized {self.__class__.__name__}")

    def start_process(
        self,
        employee_id: str,
        actor: Optional[str] = None,
        department: Optional[str] = None,
    ) -> OffboardingProcess:
        """
        Start offboarding an employee.

        All nine step records are seeded with their defaults; asset items,
        settlement checklist and systems come from the checklist templates.

        Args:
            employee_id: Employee to offboard
            actor: User starting the process
            department: Department used to pick template extras; looked up
                        from the employee record when omitted

        Returns:
            The new process

        Raises:
            ActiveProcessExistsError: if the employee already has an active process
        """
        if not employee_id or not employee_id.strip():
            raise ValueError("Employee ID is required")

        # Read-time check only; two concurrent starts can still both pass it
        existing = self.state_manager.get_active_process(employee_id)
        if existing:
            raise ActiveProcessExistsError(employee_id, existing.id)

        if department is None:
            employee = self.state_manager.get_employee(employee_id)
            department = employee.department if employee else None

        process = OffboardingProcess(
            employee_id=employee_id,
            started_by=actor,
            assets=AssetsStep(items=self.templates.get_asset_items(department)),
            settlement=SettlementStep(checklist=self.templates.get_settlement_checklist(department)),
            deactivation=DeactivationStep(systems=self.templates.get_systems(department)),
        )

        process_id = self.state_manager.create_process(employee_id, process)
        created = self._load(process_id)

        self._log_audit_event(created, "start", "start_process", True, actor=actor)
        logger.info(f"Started offboarding process {process_id} for employee {employee_id}")
        return created

    def get_process(self, process_id: str) -> OffboardingProcess:
        """Get a process by ID, raising ProcessNotFoundError if missing."""
        return self._load(process_id)

    def get_active_process(self, employee_id: str) -> Optional[OffboardingProcess]:
        """Get the employee's IN_PROGRESS process, if any."""
        return self.state_manager.get_active_process(employee_id)

    def submit_step(
        self,
        process: ProcessRef,
        step_index: int,
        payload: Union[Mapping[str, Any], StepRecord],
        complete: bool = False,
        actor: Optional[str] = None,
        attachment: Optional[Attachment] = None,
    ) -> OffboardingProcess:
        """
        Save or complete one step of a process.

        An intermediate save (``complete=False``) is never validated, keeps
        the step's previous completion flag and leaves the step pointer
        where it is. A completing save must pass the step's validator;
        on success the pointer moves to the next step, and completing the
        last step closes the process and ends the employee's employment.

        Args:
            process: Process or process ID
            step_index: Step being submitted (1-9)
            payload: New field values for the step
            complete: Whether the step is being marked complete
            actor: User making the submission
            attachment: ``(filename, data)`` to upload, on the notice and
                        documents steps only

        Returns:
            The updated process

        Raises:
            StepValidationError: if ``complete`` is set and the step precondition fails
            ProcessClosedError: if the process is no longer IN_PROGRESS
            ProcessNotFoundError: if the process does not exist
        """
        step = get_step(step_index)
        current = self._load(process)
        self._ensure_active(current, f"submit step {step.index}")

        if attachment is not None and step.attribute not in ("notice", "documents"):
            raise ValueError(f"Step {step.index} ({step.key}) does not take attachments")

        record = self._build_record(step, payload)

        if complete:
            errors = step.validator(record, current)
            if errors:
                error = StepValidationError(step.index, step.key, errors)
                logger.warning(f"Rejected completion of step {step.index} for process {current.id}: {error}")
                self._log_audit_event(
                    current, "complete", f"complete_{step.attribute}", False,
                    step_index=step.index, error=str(error), actor=actor,
                )
                raise error
            record.is_completed = True
        else:
            record.is_completed = step.get_record(current).is_completed

        self._stamp(record, complete, actor)

        if attachment is not None:
            self._attach(current, record, attachment)

        if complete and step.index == LAST_STEP:
            return self._finish(current, record, actor)

        updated = self.state_manager.update_process_step(
            current.id,
            step.attribute,
            record.model_dump(),
            new_current_step=step.index + 1 if complete else None,
        )

        event_type = "complete" if complete else "save"
        self._log_audit_event(
            updated, event_type, f"{event_type}_{step.attribute}", True,
            step_index=step.index, actor=actor,
        )
        logger.info(
            f"{'Completed' if complete else 'Saved'} step {step.index} ({step.key}) "
            f"for process {updated.id}; current step {updated.current_step}"
        )
        return updated

    def navigate_to(self, process: ProcessRef, step_id: int, actor: Optional[str] = None) -> OffboardingProcess:
        """
        Move the current step pointer to any step.

        There is no completion guard: any step can be opened regardless of
        which steps are completed.
        """
        step = get_step(step_id)
        current = self._load(process)
        self._ensure_active(current, "navigate")

        updated = self.state_manager.update_process_fields(current.id, current_step=step.index)

        self._log_audit_event(
            updated, "navigate", "navigate", True, step_index=step.index, actor=actor,
            metadata={"from_step": current.current_step},
        )
        logger.debug(f"Process {updated.id} moved from step {current.current_step} to {step.index}")
        return updated

    def cancel_process(self, process: ProcessRef, actor: Optional[str] = None) -> OffboardingProcess:
        """Cancel an IN_PROGRESS process. Cancellation is terminal."""
        current = self._load(process)
        self._ensure_active(current, "cancel")

        updated = self.state_manager.update_process_fields(
            current.id, status=ProcessStatus.CANCELLED, cancelled_at=utc_now()
        )

        self._log_audit_event(updated, "cancel", "cancel_process", True, actor=actor)
        logger.info(f"Cancelled offboarding process {updated.id}")
        return updated

    def completed_steps(self, process: ProcessRef):
        """Indices of the completed steps of a process."""
        return completed_steps(self._load(process))

    def _finish(self, current: OffboardingProcess, record: StepRecord, actor: Optional[str]) -> OffboardingProcess:
        """Complete the last step, close the process and end the employment."""
        updated = self.state_manager.update_process_fields(
            current.id,
            farewell=record.model_dump(),
            current_step=LAST_STEP,
            status=ProcessStatus.COMPLETED,
            completed_at=utc_now(),
        )

        employment_status = derive_employment_status(updated)
        if updated.notice.last_working_date:
            end_date = datetime.combine(updated.notice.last_working_date, time.min, tzinfo=timezone.utc)
        else:
            end_date = utc_now()

        try:
            self.state_manager.update_employee_status(updated.employee_id, employment_status, end_date)
        except PersistenceError:
            # Reopen the process so the completion can be retried
            logger.error(
                f"Failed to end employment of {updated.employee_id}; reopening process {current.id}"
            )
            self.state_manager.update_process_fields(
                current.id,
                farewell=current.farewell.model_dump(),
                current_step=current.current_step,
                status=current.status,
                completed_at=current.completed_at,
            )
            raise

        self._log_audit_event(
            updated, "finish", "complete_farewell", True, step_index=LAST_STEP, actor=actor,
            metadata={"employment_status": employment_status.value},
        )
        logger.info(
            f"Completed offboarding process {updated.id}; employee {updated.employee_id} "
            f"is now {employment_status.value}"
        )
        return updated

    def _build_record(self, step: StepDefinition, payload: Union[Mapping[str, Any], StepRecord]) -> StepRecord:
        """Validate a payload into the step's record model."""
        if isinstance(payload, StepRecord):
            data = payload.model_dump()
        else:
            data = dict(payload)
        data.pop("is_completed", None)
        data.pop("isCompleted", None)

        record = step.model.model_validate(data)
        if isinstance(record, HandoverStep):
            normalize_handover(record)
        return record

    def _stamp(self, record: StepRecord, complete: bool, actor: Optional[str]):
        """Fill in the timestamps and attribution each step records."""
        now = utc_now()

        if isinstance(record, NoticeStep) and complete:
            record.submitted_at = now
        elif isinstance(record, ApprovalStep) and complete and record.status != ApprovalStatus.PENDING:
            record.approved_by = actor or record.approved_by
            record.approved_at = now
        elif isinstance(record, ExitInterviewStep) and complete:
            record.conducted_at = record.conducted_at or now
        elif isinstance(record, DeactivationStep):
            for system in record.systems:
                if not system.deactivated:
                    system.deactivated_at = None
                elif system.deactivated_at is None:
                    system.deactivated_at = now

    def _attach(self, process: OffboardingProcess, record: StepRecord, attachment: Attachment):
        """Upload an attachment and keep its URL on the step record."""
        filename, data = attachment
        base = f"offboarding/{process.employee_id}/{process.id}"

        if isinstance(record, NoticeStep):
            record.attachments = [self.attachment_store.upload(f"{base}/{filename}", data)]
        elif isinstance(record, DocumentsStep):
            url = self.attachment_store.upload(f"{base}/orders/{filename}", data)
            order = DocumentAttachment(name=TERMINATION_ORDER_NAME, url=url)
            others = [d for d in record.other_documents if d.name != TERMINATION_ORDER_NAME]
            record.other_documents = others + [order]

    def _load(self, process: ProcessRef) -> OffboardingProcess:
        process_id = process.id if isinstance(process, OffboardingProcess) else process
        loaded = self.state_manager.get_process(process_id)
        if loaded is None:
            raise ProcessNotFoundError(process_id)
        return loaded

    def _ensure_active(self, process: OffboardingProcess, action: str):
        if not process.is_active:
            raise ProcessClosedError(process.id, process.status.value, action)

    def _log_audit_event(
        self,
        process: OffboardingProcess,
        event_type: str,
        action: str,
        success: bool,
        step_index: Optional[int] = None,
        error: Optional[str] = None,
        actor: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log an audit event.

        Audit events are written after the change they describe has been
        stored, so a failed audit write is logged and does not fail the
        operation.

        Returns:
            Audit record ID
        """
        audit_record = AuditRecord(
            event_type=event_type,
            employee_id=process.employee_id,
            process_id=process.id,
            step_index=step_index,
            action=action,
            success=success,
            error_message=error,
            actor=actor,
            metadata=metadata or {},
        )

        try:
            self.audit_logger.log_event(audit_record)
        except OSError as e:
            logger.error(
                f"Audit event {event_type} for process {process.id} was not recorded: {e}"
            )
        return audit_record.id


__all__ = ["OffboardingEngine", "TERMINATION_ORDER_NAME"]
