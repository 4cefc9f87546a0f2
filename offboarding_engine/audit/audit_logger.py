"""
Audit Logging Module.

This module provides an append-only record of every change made to an
offboarding process: starts, step saves and completions, rejected
submissions, navigation, cancellation and final completion.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from ..models import AuditRecord

logger = logging.getLogger(__name__)


class AuditLogger:
    """
    Logger for offboarding audit events.

    Persists audit records as JSON lines in one file per day.
    """

    def __init__(self, audit_dir: str = "audit_logs"):
        """
        Initialize the audit logger.

        Args:
            audit_dir: Directory to store audit logs
        """
        self.audit_dir = Path(audit_dir)
        self.audit_dir.mkdir(parents=True, exist_ok=True)

    def log_event(self, record: AuditRecord) -> str:
        """
        Log an audit event.

        Args:
            record: The audit record to log

        Returns:
            The record ID
        """
        try:
            date_str = datetime.now(timezone.utc).strftime("%Y-%m-%d")
            log_file = self.audit_dir / f"audit_{date_str}.jsonl"

            with open(log_file, "a", encoding="utf-8") as f:
                data = record.model_dump(mode="json")
                f.write(json.dumps(data) + "\n")

            logger.debug(f"Logged audit event {record.id} for process {record.process_id}")
            return record.id

        except OSError as e:
            logger.error(f"Failed to log audit event: {e}")
            raise

    def get_events(
        self,
        employee_id: Optional[str] = None,
        process_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[AuditRecord]:
        """
        Retrieve audit events with filtering, most recent first.

        Naive ``start_date`` / ``end_date`` values are taken to be UTC.

        Args:
            employee_id: Filter by employee ID
            process_id: Filter by offboarding process ID
            start_date: Only events at or after this time
            end_date: Only events at or before this time
            limit: Maximum number of records to return

        Returns:
            List of matching AuditRecords
        """
        start_date = _as_utc(start_date)
        end_date = _as_utc(end_date)

        results: List[AuditRecord] = []
        for record in self._iter_records_newest_first(start_date):
            if len(results) >= limit:
                break
            if employee_id and record.employee_id != employee_id:
                continue
            if process_id and record.process_id != process_id:
                continue
            if start_date and record.timestamp < start_date:
                continue
            if end_date and record.timestamp > end_date:
                continue
            results.append(record)

        return results

    def _iter_records_newest_first(self, start_date: Optional[datetime]) -> Iterator[AuditRecord]:
        """Yield stored records from the newest daily file backwards."""
        oldest_day = start_date.astimezone(timezone.utc).strftime("%Y-%m-%d") if start_date else None

        for log_file in sorted(self.audit_dir.glob("audit_*.jsonl"), reverse=True):
            day = log_file.stem[len("audit_"):]
            if oldest_day and day < oldest_day:
                break

            try:
                lines = log_file.read_text(encoding="utf-8").splitlines()
            except OSError as e:
                logger.error(f"Failed to read log file {log_file}: {e}")
                continue

            for line in reversed(lines):
                if not line.strip():
                    continue
                try:
                    yield AuditRecord.model_validate_json(line)
                except ValueError as e:
                    logger.warning(f"Skipping unreadable audit record in {log_file.name}: {e}")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
