"""
State Manager for the Offboarding Engine.

Document store for offboarding processes and the employee records they
update. Records are kept in memory with optional JSON file persistence,
and are handed out as copies: callers change stored state only through
the update methods.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..exceptions import PersistenceError, ProcessNotFoundError
from ..models import (
    EmployeeRecord,
    EmploymentStatus,
    OffboardingProcess,
    ProcessStatus,
    utc_now,
)

logger = logging.getLogger(__name__)


class StateManager:
    """
    Manages the state of offboarding processes and employee records.

    Provides in-memory state management with optional JSON file persistence.
    There is no uniqueness constraint on active processes: the single
    active process per employee is found by filtering on status at read time.
    """

    def __init__(self, storage_path: Optional[Union[str, Path]] = None):
        """
        Initialize the state manager.

        Args:
            storage_path: Path to store state as JSON.
                         If None, state is kept in memory only.
        """
        self.storage_path = Path(storage_path) if storage_path else None
        self.processes: Dict[str, OffboardingProcess] = {}
        self.employees: Dict[str, EmployeeRecord] = {}

        # Create storage directory if needed
        if self.storage_path:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_state()

        logger.info(
            f"Initialized StateManager with {'persistent' if self.storage_path else 'in-memory'} storage"
        )

    # Processes

    def create_process(self, employee_id: str, initial_state: OffboardingProcess) -> str:
        """
        Store a new offboarding process.

        Args:
            employee_id: Employee being offboarded
            initial_state: Fully seeded process record

        Returns:
            The new process ID
        """
        process = initial_state.model_copy(deep=True)
        process.employee_id = employee_id
        self.processes[process.id] = process
        try:
            self._save_state()
        except PersistenceError:
            del self.processes[process.id]
            raise

        logger.info(f"Created offboarding process {process.id} for employee {employee_id}")
        return process.id

    def get_process(self, process_id: str) -> Optional[OffboardingProcess]:
        """Get a copy of a process by ID, or None."""
        process = self.processes.get(process_id)
        return process.model_copy(deep=True) if process else None

    def get_active_process(self, employee_id: str) -> Optional[OffboardingProcess]:
        """
        Get the IN_PROGRESS process for an employee.

        If duplicates exist, the earliest started one is returned.

        Args:
            employee_id: Employee ID to look up

        Returns:
            Copy of the active process if found, None otherwise
        """
        active = self.list_processes(employee_id=employee_id, status=ProcessStatus.IN_PROGRESS)
        if len(active) > 1:
            logger.warning(
                f"Employee {employee_id} has {len(active)} active offboarding processes"
            )
        return active[0] if active else None

    def list_processes(
        self,
        employee_id: Optional[str] = None,
        status: Optional[ProcessStatus] = None,
    ) -> List[OffboardingProcess]:
        """List copies of processes filtered by field equality, oldest first."""
        results = [
            p
            for p in self.processes.values()
            if (employee_id is None or p.employee_id == employee_id)
            and (status is None or p.status == status)
        ]
        results.sort(key=lambda p: p.started_at)
        return [p.model_copy(deep=True) for p in results]

    def update_process_step(
        self,
        process_id: str,
        step_key: str,
        step_payload: Dict[str, Any],
        new_current_step: Optional[int] = None,
    ) -> OffboardingProcess:
        """
        Replace one step record of a process, optionally moving the step pointer.

        Args:
            process_id: Process to update
            step_key: Attribute name of the step record (``notice``, ``assets``, ...)
            step_payload: The complete new step record
            new_current_step: New value for the current step pointer, if any

        Returns:
            Copy of the updated process
        """
        fields: Dict[str, Any] = {step_key: step_payload}
        if new_current_step is not None:
            fields["current_step"] = new_current_step
        return self.update_process_fields(process_id, **fields)

    def update_process_fields(self, process_id: str, **fields: Any) -> OffboardingProcess:
        """
        Partially update a process.

        The merged record is validated before it replaces the stored one,
        so an invalid update leaves the stored process untouched.
        """
        existing = self.processes.get(process_id)
        if not existing:
            raise ProcessNotFoundError(process_id)

        data = existing.model_dump()
        data.update(fields)
        updated = OffboardingProcess.model_validate(data)

        self.processes[process_id] = updated
        try:
            self._save_state()
        except PersistenceError:
            self.processes[process_id] = existing
            raise

        logger.debug(f"Updated process {process_id}: {', '.join(fields)}")
        return updated.model_copy(deep=True)

    # Employees

    def upsert_employee(self, employee: EmployeeRecord) -> EmployeeRecord:
        """Create or replace an employee record."""
        previous = self.employees.get(employee.employee_id)
        self.employees[employee.employee_id] = employee.model_copy(deep=True)
        try:
            self._save_state()
        except PersistenceError:
            if previous is None:
                del self.employees[employee.employee_id]
            else:
                self.employees[employee.employee_id] = previous
            raise

        logger.info(f"Stored employee record {employee.employee_id}")
        return employee

    def get_employee(self, employee_id: str) -> Optional[EmployeeRecord]:
        employee = self.employees.get(employee_id)
        return employee.model_copy(deep=True) if employee else None

    def update_employee_status(
        self,
        employee_id: str,
        status: EmploymentStatus,
        employment_end_date: Optional[datetime] = None,
    ) -> EmployeeRecord:
        """
        Set the employment status of an employee.

        Employees unknown to this store get a minimal record, since the
        employee directory may live elsewhere.

        Args:
            employee_id: Employee to update
            status: New employment status
            employment_end_date: Last day of employment

        Returns:
            Copy of the updated employee record
        """
        employee = self.employees.get(employee_id)
        if not employee:
            logger.warning(f"Employee {employee_id} not found, creating minimal record")
            employee = EmployeeRecord(employee_id=employee_id)

        previous = self.employees.get(employee_id)
        updated = employee.model_copy(
            update={
                "status": status,
                "employment_end_date": employment_end_date,
                "updated_at": utc_now(),
            }
        )
        self.employees[employee_id] = updated
        try:
            self._save_state()
        except PersistenceError:
            if previous is None:
                del self.employees[employee_id]
            else:
                self.employees[employee_id] = previous
            raise

        logger.info(f"Set employee {employee_id} status to {status.value}")
        return updated.model_copy(deep=True)

    def get_summary(self) -> Dict[str, Any]:
        """
        Get a summary of stored processes.

        Returns:
            Dictionary with process statistics
        """
        summary: Dict[str, Any] = {
            "total_processes": len(self.processes),
            "total_employees": len(self.employees),
            "processes_by_status": {},
            "active_by_step": {},
        }

        for process in self.processes.values():
            status = process.status.value
            summary["processes_by_status"][status] = summary["processes_by_status"].get(status, 0) + 1

            if process.is_active:
                step = process.current_step
                summary["active_by_step"][step] = summary["active_by_step"].get(step, 0) + 1

        return summary

    def _save_state(self):
        """Save current state to persistent storage."""
        if not self.storage_path:
            return

        try:
            state_data = {
                "processes": {
                    pid: process.model_dump(mode="json") for pid, process in self.processes.items()
                },
                "employees": {
                    eid: employee.model_dump(mode="json") for eid, employee in self.employees.items()
                },
                "last_updated": utc_now().isoformat(),
            }

            with open(self.storage_path, "w", encoding="utf-8") as f:
                json.dump(state_data, f, indent=2)

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save state to {self.storage_path}: {e}")
            raise PersistenceError(f"Failed to save state to {self.storage_path}: {e}") from e

    def _load_state(self):
        """Load state from persistent storage."""
        if not self.storage_path or not self.storage_path.exists():
            return

        try:
            with open(self.storage_path, encoding="utf-8") as f:
                state_data = json.load(f)

            for pid, process_data in state_data.get("processes", {}).items():
                self.processes[pid] = OffboardingProcess.model_validate(process_data)

            for eid, employee_data in state_data.get("employees", {}).items():
                self.employees[eid] = EmployeeRecord.model_validate(employee_data)

            logger.info(
                f"Loaded {len(self.processes)} processes and {len(self.employees)} employees "
                f"from {self.storage_path}"
            )

        except (OSError, ValueError) as e:
            logger.error(f"Failed to load state from {self.storage_path}: {e}")
            raise PersistenceError(f"Failed to load state from {self.storage_path}: {e}") from e
