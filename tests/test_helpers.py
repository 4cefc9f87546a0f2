"""
Tests for the step table, step validators and derived helpers.
"""

import pytest

from offboarding_engine.models import (
    AssetItem,
    AssetsStep,
    EmploymentStatus,
    HandoverGroup,
    HandoverStep,
    HandoverTask,
    NoticeStep,
    OffboardingProcess,
    SeparationType,
    TaskStatus,
)
from offboarding_engine.workflows import (
    STEPS,
    completed_steps,
    create_process_summary,
    derive_employment_status,
    get_step,
    get_step_by_key,
    handover_progress,
    progress_percent,
)
from offboarding_engine.workflows import validators


class TestStepTable:
    """Test cases for the step table."""

    def test_sequence(self):
        assert [s.index for s in STEPS] == list(range(1, 10))
        assert [s.key for s in STEPS] == [
            "NOTICE", "APPROVAL", "HANDOVER", "ASSETS", "EXIT_INTERVIEW",
            "SETTLEMENT", "DOCUMENTS", "DEACTIVATION", "FAREWELL",
        ]

    def test_every_attribute_exists_on_process(self):
        process = OffboardingProcess(employee_id="E1")
        for step in STEPS:
            assert isinstance(step.get_record(process), step.model)

    @pytest.mark.parametrize("index", [0, 10, -1, True])
    def test_out_of_range(self, index):
        with pytest.raises(ValueError):
            get_step(index)

    def test_lookup_by_key(self):
        assert get_step_by_key("EXIT_INTERVIEW").index == 5
        assert get_step_by_key("exit_interview").index == 5
        with pytest.raises(ValueError):
            get_step_by_key("ONBOARDING")


class TestValidators:
    """Test cases for step completion validators."""

    def test_notice_requires_reason_and_date(self):
        process = OffboardingProcess(employee_id="E1")

        errors = validators.validate_notice(NoticeStep(), process)
        assert errors == ["Last working date is required", "Reason is required"]

        valid = NoticeStep(reason="personal", last_working_date="2024-01-31")
        assert validators.validate_notice(valid, process) == []

    def test_assets_names_missing_items(self):
        record = AssetsStep(items=[
            AssetItem(item="Badge", returned=True),
            AssetItem(item="Laptop", returned=False),
        ])
        errors = validators.validate_assets(record, OffboardingProcess(employee_id="E1"))
        assert errors == ["Assets not returned: Laptop"]

    def test_damaged_but_returned_asset_is_fine(self):
        record = AssetsStep(items=[AssetItem(item="Laptop", returned=True, condition="DAMAGED")])
        assert validators.validate_assets(record, OffboardingProcess(employee_id="E1")) == []

    def test_farewell_is_unconditional(self):
        process = OffboardingProcess(employee_id="E1")
        assert validators.validate_farewell(process.farewell, process) == []


class TestDerivedValues:
    """Test cases for completed steps and progress."""

    def test_completed_steps_any_order(self):
        process = OffboardingProcess(employee_id="E1")
        process.documents.is_completed = True
        process.notice.is_completed = True
        process.deactivation.is_completed = True

        assert completed_steps(process) == [1, 7, 8]

    @pytest.mark.parametrize("done,total,expected", [
        (0, 0, 100),
        (0, 4, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (4, 4, 100),
    ])
    def test_progress_percent(self, done, total, expected):
        assert progress_percent(done, total) == expected

    def test_handover_progress(self):
        process = OffboardingProcess(employee_id="E1")
        assert handover_progress(process) == 100

        process.handover = HandoverStep(groups=[
            HandoverGroup(title="A", tasks=[
                HandoverTask(task="x", status=TaskStatus.DONE),
                HandoverTask(task="y"),
            ]),
            HandoverGroup(title="B", tasks=[HandoverTask(task="z")]),
        ])
        assert handover_progress(process) == 33

    def test_derive_employment_status(self):
        process = OffboardingProcess(employee_id="E1")
        assert derive_employment_status(process) == EmploymentStatus.RESIGNED

        process.notice.type = SeparationType.TERMINATION
        assert derive_employment_status(process) == EmploymentStatus.TERMINATED

    def test_summary(self):
        process = OffboardingProcess(employee_id="E1", current_step=3)
        process.notice.is_completed = True
        process.approval.is_completed = True

        summary = create_process_summary(process)

        assert summary["current_step_key"] == "HANDOVER"
        assert summary["completed_steps"] == [1, 2]
        assert summary["overall_progress"] == 22
        assert summary["status"] == "IN_PROGRESS"
