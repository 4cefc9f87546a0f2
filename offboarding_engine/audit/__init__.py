"""
Audit Package.

Exports AuditLogger and AttachmentStore.
"""

from .attachment_store import AttachmentStore
from .audit_logger import AuditLogger

__all__ = ["AttachmentStore", "AuditLogger"]
