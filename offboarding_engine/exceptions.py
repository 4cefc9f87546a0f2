"""
Exceptions raised by the Offboarding Engine.
"""

from typing import List, Optional


class OffboardingError(Exception):
    """Base class for all offboarding engine errors."""


class StepValidationError(OffboardingError):
    """Raised when a completing submission fails its step precondition."""

    def __init__(self, step_index: int, step_key: str, errors: List[str]):
        msg = f"Cannot complete step {step_index} ({step_key})"
        if errors:
            msg += f": {'; '.join(errors)}"
        super().__init__(msg)
        self.step_index = step_index
        self.step_key = step_key
        self.errors = list(errors)


class ProcessNotFoundError(OffboardingError):
    """Raised when an offboarding process id does not resolve."""

    def __init__(self, process_id: str):
        super().__init__(f"Offboarding process {process_id} not found")
        self.process_id = process_id


class ActiveProcessExistsError(OffboardingError):
    """Raised when starting a process for an employee who already has one running."""

    def __init__(self, employee_id: str, process_id: str):
        super().__init__(
            f"Employee {employee_id} already has an active offboarding process ({process_id})"
        )
        self.employee_id = employee_id
        self.process_id = process_id


class ProcessClosedError(OffboardingError):
    """Raised when mutating a process that is no longer IN_PROGRESS."""

    def __init__(self, process_id: str, status: str, action: Optional[str] = None):
        msg = f"Offboarding process {process_id} is {status}"
        if action:
            msg = f"Cannot {action}: {msg}"
        super().__init__(msg)
        self.process_id = process_id
        self.status = status


class PersistenceError(OffboardingError):
    """Raised when a store cannot read or write its backing storage."""
