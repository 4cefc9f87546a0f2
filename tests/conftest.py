"""
Shared fixtures for the Offboarding Engine tests.
"""

import pytest

from offboarding_engine.engine import StateManager
from offboarding_engine.models import EmployeeRecord
from offboarding_engine.workflows import OffboardingEngine


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end tests across components")


@pytest.fixture
def engine_config(tmp_path):
    """Engine configuration writing everything under a temporary directory."""
    return {
        "state_file": str(tmp_path / "state.json"),
        "audit_dir": str(tmp_path / "audit"),
        "attachments_dir": str(tmp_path / "attachments"),
    }


@pytest.fixture
def engine(engine_config):
    """An OffboardingEngine with an employee on file."""
    eng = OffboardingEngine(engine_config)
    eng.state_manager.upsert_employee(
        EmployeeRecord(
            employee_id="E1001",
            name="Jane Doe",
            email="jane.doe@company.com",
            department="Engineering",
            title="Software Engineer",
        )
    )
    return eng


@pytest.fixture
def process(engine):
    """A freshly started offboarding process for E1001."""
    return engine.start_process("E1001", actor="hr.manager")


@pytest.fixture
def notice_payload():
    return {"type": "RESIGNATION", "reason": "personal", "lastWorkingDate": "2024-01-31"}


@pytest.fixture
def memory_state_manager():
    return StateManager()
